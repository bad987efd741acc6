"""Tests for GitHub collaborators.

Test Files and Coverage:
========================

| Test File          | Test Classes         | Tested Constructs               | Tested Functionalities                      |
|--------------------|----------------------|---------------------------------|---------------------------------------------|
| test_client.py     | GitHubClientTest     | GitHubClient                    | Pagination, tip SHA, comments, auth errors  |
| test_comments.py   | UpsertCommentTest    | find_existing(), upsert_comment | Create, update, permission failures         |
"""
