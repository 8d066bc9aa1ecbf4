"""HTTP service exposing intent graph storage and analysis."""
