"""SimpleSwap command-line interface."""
