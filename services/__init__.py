"""Auth flows, credential validation and Google federation."""
