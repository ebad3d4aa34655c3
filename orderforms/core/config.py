"""
Submitter profile and runtime configuration.

The profile is a small JSON file (orderforms_config.json) describing who is
submitting orders (organization, contact details, default project) plus a
few knobs for document generation. Environment variables override the file,
the file overrides DEFAULTS.

Example:
    {
      "org_name": "Comet Robotics",
      "contact_name": "Jane Doe",
      "contact_email": "jane.doe@utdallas.edu",
      "contact_phone": "(555) 555-5555",
      "project": "General",
      "form_item_limit": 20
    }
"""

import json
import os
import logging
from dataclasses import dataclass, fields, replace
from typing import Callable, Optional

from orderforms.core import paths

log = logging.getLogger("orderforms.config")

DEFAULTS = {
    "org_name": "",
    "contact_name": "",
    "contact_email": "",
    "contact_phone": "",
    "project": "",
    "justification": "",
    "output_dir": "",
    "purchase_form_path": "",
    "form_item_limit": 20,
}

# env var → profile key
ENV_OVERRIDES = {
    "ORDERFORMS_ORG_NAME": "org_name",
    "ORDERFORMS_CONTACT_NAME": "contact_name",
    "ORDERFORMS_CONTACT_EMAIL": "contact_email",
    "ORDERFORMS_CONTACT_PHONE": "contact_phone",
    "ORDERFORMS_PROJECT": "project",
    "ORDERFORMS_FORM_ITEM_LIMIT": "form_item_limit",
}


@dataclass(frozen=True)
class Profile:
    org_name: str = ""
    contact_name: str = ""
    contact_email: str = ""
    contact_phone: str = ""
    project: str = ""
    justification: str = ""
    output_dir: str = ""
    purchase_form_path: str = ""
    form_item_limit: int = 20

    def missing_contact_fields(self) -> list:
        """Names of contact fields the purchase form needs but the profile lacks."""
        required = ("org_name", "contact_name", "contact_email", "contact_phone")
        return [name for name in required if not getattr(self, name).strip()]

    def resolved_output_dir(self) -> str:
        return self.output_dir or paths.OUTPUT_DIR

    def resolved_purchase_form_path(self) -> str:
        return self.purchase_form_path or paths.PURCHASE_FORM_PATH


def load_config(path: Optional[str] = None) -> Profile:
    """Load the profile from JSON + env. A missing file means defaults."""
    path = path or paths.CONFIG_PATH
    raw = dict(DEFAULTS)
    try:
        with open(path, "r") as f:
            raw.update(json.load(f))
    except FileNotFoundError:
        log.info("No profile at %s, using defaults", path)
    except json.JSONDecodeError as e:
        log.error("Profile %s is not valid JSON: %s", path, e)
        raise

    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            raw[key] = value

    known = {f.name for f in fields(Profile)}
    unknown = sorted(set(raw) - known)
    if unknown:
        log.warning("Ignoring unknown profile keys: %s", ", ".join(unknown))

    profile = Profile(**{k: v for k, v in raw.items() if k in known})
    try:
        limit = int(profile.form_item_limit)
    except (TypeError, ValueError):
        log.warning("form_item_limit %r is not an integer, using %d",
                    profile.form_item_limit, DEFAULTS["form_item_limit"])
        limit = DEFAULTS["form_item_limit"]
    return replace(profile, form_item_limit=limit)


def file_template_resolver(path: str) -> Callable[[], bytes]:
    """Default purchase-form resolver: read the template PDF from disk."""
    def resolve() -> bytes:
        with open(path, "rb") as f:
            return f.read()
    return resolve
