"""HTTP surface of the BuzzNet API."""
