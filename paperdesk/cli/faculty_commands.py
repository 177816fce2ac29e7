"""
Faculty Directory CLI Commands
"""
from paperdesk.cli.base import CLI_IDENTITY, Command
from paperdesk.errors import APIError
from paperdesk.services.faculty_directory import list_profiles, register_profile


class FacultyCommand(Command):
    """Faculty directory CLI command handler."""

    def execute(self, args) -> int:
        if args.faculty_action == "add":
            return self._add(args)
        elif args.faculty_action == "list":
            return self._list(args)
        else:
            print("Error: Unknown faculty action")
            return 1

    def _add(self, args) -> int:
        details = {
            key: getattr(args, key)
            for key in ("username", "email", "phone", "campus_name", "qualification", "expertise")
            if getattr(args, key, None)
        }
        if self.dry_run:
            print(f"[DRY RUN] Would register {args.faculty_id} ({args.full_name})")
            return 0

        try:
            profile = self.run_with_session(
                lambda db: register_profile(db, CLI_IDENTITY, args.faculty_id, args.full_name, **details)
            )
        except APIError as e:
            print(f"Error: {e.message}")
            return 1

        print(f"✓ Registered {profile.faculty_id}: {profile.full_name}")
        return 0

    def _list(self, args) -> int:
        try:
            profiles = self.run_with_session(lambda db: list_profiles(db, CLI_IDENTITY))
        except APIError as e:
            print(f"Error: {e.message}")
            return 1

        print(f"{'FACULTY ID':<15} {'NAME':<35} CAMPUS")
        for profile in profiles:
            print(f"{profile.faculty_id:<15} {profile.full_name:<35} {profile.campus_name or '-'}")
        print(f"\n{len(profiles)} profile(s)")
        return 0
