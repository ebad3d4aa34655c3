"""Collaborators outside the document pipeline.

Modules:
    remaining_items_excel — Overflow spreadsheet for items past the web form's limit
    form_submitter        — Payload/result contract with the form-automation sidecar
"""
