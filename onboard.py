#!/usr/bin/env python3
"""
Interactive onboarding wizard.

    python onboard.py

Walks through: account → profile → session token → ready.
"""
from __future__ import annotations

import sys
from pathlib import Path

import yaml

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from careerdesk.config import CONFIG_DIR, PROFILE_PATH, ensure_dirs, load_profile_file
from careerdesk.log import get_logger
from careerdesk.store import Store

log = get_logger(__name__)

# ── Helpers ──────────────────────────────────────────────────────────────


def _ask(prompt: str, default: str = "") -> str:
    hint = f" [{default}]" if default else ""
    val = input(f"  {prompt}{hint}: ").strip()
    return val or default


def _ask_yn(prompt: str, default: bool = True) -> bool:
    hint = "Y/n" if default else "y/N"
    val = input(f"  {prompt} ({hint}): ").strip().lower()
    if not val:
        return default
    return val in ("y", "yes")


def _banner() -> None:
    print()
    print("╔════════════════════════════════════════════╗")
    print("║   CareerDesk — Setup                       ║")
    print("╚════════════════════════════════════════════╝")
    print()


def _step(num: int, total: int, title: str) -> None:
    print(f"\n{'─'*50}")
    print(f"  Step {num}/{total}: {title}")
    print(f"{'─'*50}")


# ── Steps ────────────────────────────────────────────────────────────────


def step_account(store: Store) -> str:
    _step(1, 3, "Account")
    email = ""
    while not email:
        email = _ask("Your email address")
    user_id = store.find_user(email)
    if user_id:
        print(f"  ✓ Existing account found ({user_id})")
        return user_id
    user_id = store.create_user(email)
    print(f"  ✓ Account created ({user_id})")
    return user_id


def _blank_profile() -> dict:
    name = _ask("Full name")
    return {
        "personal_details": {
            "full_name": name,
            "email": _ask("Contact email"),
            "phone": _ask("Phone"),
            "address": _ask("Address"),
            "summary": _ask("One-line professional summary"),
        },
        "experiences": [],
        "education": [],
    }


def write_profile_file(profile: dict, path: Path | None = None) -> Path:
    """Write a profile dict to YAML so it can be edited and re-imported."""
    path = path or PROFILE_PATH
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    header = (
        "# ============================================================\n"
        "# Candidate Profile — imported by `python onboard.py`\n"
        "# Add experiences / education entries, then run onboard again\n"
        "# ============================================================\n\n"
    )
    yaml_str = yaml.dump(profile, default_flow_style=False, sort_keys=False, allow_unicode=True)
    path.write_text(header + yaml_str, encoding="utf-8")
    log.info("Profile written → %s", path)
    return path


def step_profile(store: Store, user_id: str) -> None:
    _step(2, 3, "Profile")
    path_str = _ask("Profile YAML path", str(PROFILE_PATH)).strip("'\"")
    path = Path(path_str).expanduser()

    if path.exists():
        profile = load_profile_file(path)
    else:
        print(f"  No profile at {path} — let's create a minimal one.")
        profile = _blank_profile()
        write_profile_file(profile, path)

    pd = profile.get("personal_details") or {}
    print(f"\n  Name:        {pd.get('full_name', '?')}")
    print(f"  Experience:  {len(profile['experiences'])} entr(ies)")
    print(f"  Education:   {len(profile['education'])} entr(ies)")
    if not _ask_yn("\n  Import this profile (replaces the stored one)?", default=True):
        print("  Skipped profile import.")
        return
    store.save_profile(user_id, profile)
    print("  ✓ Profile imported")


def step_token(store: Store, user_id: str) -> str:
    _step(3, 3, "Session token")
    token = store.issue_token(user_id)
    print("  Send this with every API call:")
    print(f"    Authorization: Bearer {token}")
    return token


def main() -> None:
    _banner()
    ensure_dirs()
    store = Store()
    user_id = step_account(store)
    step_profile(store, user_id)
    step_token(store, user_id)
    print("\n  All set. Start the API with:  python run_server.py\n")


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, EOFError):
        print("\n  Setup cancelled.")
        sys.exit(1)
