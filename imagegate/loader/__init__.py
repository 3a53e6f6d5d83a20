"""Allowed-source matching, content-type checks and proxy selection for image loaders."""