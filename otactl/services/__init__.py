"""Services: account collaborator, storage, packaging and orchestration."""
