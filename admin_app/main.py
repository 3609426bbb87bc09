"""Entry point for the branch admin Textual app."""

from __future__ import annotations

from admin_app.admin_app import BranchAdminApp


def main() -> None:
    """Run the Textual application."""
    BranchAdminApp().run()


if __name__ == "__main__":
    main()
