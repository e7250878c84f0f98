"""Stateful helpers around the core: collaborator adapter, logs, widgets."""
