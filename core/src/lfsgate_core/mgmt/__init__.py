"""Operator-facing management surface (/mgmt).

Server-rendered pages for browsing objects, locks and users, plus user
provisioning and object deletion. Every route except the stylesheets sits
behind HTTP Basic auth against the configured admin credentials.
"""
