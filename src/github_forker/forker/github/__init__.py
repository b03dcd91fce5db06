"""GitHub API access and the fork/issue services built on it."""
