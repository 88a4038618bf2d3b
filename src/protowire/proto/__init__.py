"""Hand-written reference message sets used by the test suite and as examples."""
