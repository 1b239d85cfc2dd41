"""Local folder side of provisioning: copy the template, then rename its files."""
