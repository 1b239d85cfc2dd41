"""Issue provisioning components.

- Settings loaded from .env, plus the JSON issues file
- Structured logging
- GitLab issue client
- Folder provisioning and filename normalization
- Desktop notifications
- The runner that ties them together
"""
