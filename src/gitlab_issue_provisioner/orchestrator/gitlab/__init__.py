from gitlab_issue_provisioner.orchestrator.gitlab.client import CreatedIssue, GitLabClient

__all__ = ["CreatedIssue", "GitLabClient"]
