"""Conversion bundles used by the CLI and API"""
