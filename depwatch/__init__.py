"""depwatch — outdated-dependency subscriptions for GitHub and GitLab repositories."""

__version__ = "0.1.0"
