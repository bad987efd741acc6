"""GitHub collaborators for publishing size reports.

This package contains:
- client: GitHubClient for pull requests, commits and issue comments
- comments: Find-or-create upsert of the report comment
"""
