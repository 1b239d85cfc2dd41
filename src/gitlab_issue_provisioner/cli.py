"""Console entrypoint; the CLI itself lives in `gitlab_issue_provisioner.orchestrator.main`."""

from __future__ import annotations

from gitlab_issue_provisioner.orchestrator.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
