"""
Order Forms — pasted order spreadsheet rows → per-vendor purchase-order PDFs

Packages:
    intake/     Clipboard tokenizer, row mapper, validator, transformer, grouping
    forms/      Order-list rendering, purchase-form filling, merging, orchestration
    agents/     External collaborators (overflow spreadsheet, form submission)
    api/        HTTP routes for validate / preview / generate
    core/       Shared configuration, logging, errors, and paths
"""

__version__ = "1.3.0"
