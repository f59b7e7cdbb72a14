"""Provision a randomly generated value into a Kubernetes Secret, once."""
