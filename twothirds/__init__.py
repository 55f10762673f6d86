"""Two-thirds of the average: a commit-reveal guessing game."""
