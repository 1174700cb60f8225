"""HTTP control API for hydractl.

Authenticates callers, resolves the target environment and dispatches
commands to an Actuator, mapping classified failures to status codes.
"""
