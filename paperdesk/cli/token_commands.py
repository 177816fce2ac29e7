"""
Identity token CLI Commands

Tokens are normally issued by the login service; these are for local
development and smoke tests against a shared JWT_SECRET_KEY.
"""
from datetime import timedelta

from paperdesk.cli.base import Command
from paperdesk.rbac import Role, create_access_token


class TokenCommand(Command):

    def execute(self, args) -> int:
        if args.token_action == "issue":
            return self._issue(args)
        print("Error: Unknown token action")
        return 1

    def _issue(self, args) -> int:
        role = Role(args.role)
        if role == Role.FACULTY and not args.faculty_id:
            print("Error: --faculty-id is required for faculty tokens")
            return 1

        expires = timedelta(minutes=args.minutes) if args.minutes else None
        print(create_access_token(role, args.faculty_id, args.username, expires))
        return 0
