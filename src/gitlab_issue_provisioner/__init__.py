"""GitLab Issue Provisioner.

A run-to-completion batch job that, for each configured issue:
- creates the issue in a GitLab project (and sets its time estimate)
- provisions a local working folder from a template, named after the issue id
- renames the copied files to carry the issue id
- shows a desktop notification that opens the folder
"""

__version__ = "0.1.0"

from gitlab_issue_provisioner.orchestrator.config import ProvisionerSettings

__all__ = ["__version__", "ProvisionerSettings"]
