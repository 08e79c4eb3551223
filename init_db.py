"""
Local settings database tool.

The console persists the account, API key and last selected player in a
small settings table (SQLite by default, see DATABASE_URL). The table is
created on first use; this script lets an operator inspect or wipe it.

Usage:
    python init_db.py            # create the table and show what is stored
    python init_db.py --reset    # forget stored credentials and selection
"""

import sys

from database import DatabaseManager, SettingsService
from database.services import ACCOUNT_KEY, API_KEY_KEY, SELECTED_PLAYER_KEY


def show_settings(db: DatabaseManager):
    """Print the stored console state with the API key masked."""
    stored = SettingsService(db).get_many(ACCOUNT_KEY, API_KEY_KEY, SELECTED_PLAYER_KEY)
    api_key = stored[API_KEY_KEY]

    print("\n📋 Stored settings:")
    print(f"   Account:         {stored[ACCOUNT_KEY] or '-'}")
    print(f"   API key:         {api_key[:5] + '...' if api_key else '-'}")
    print(f"   Selected player: {stored[SELECTED_PLAYER_KEY] or '-'}")


def init_database():
    """Create the settings table if needed and show its contents."""
    print("="*60)
    print("Settings Database")
    print("="*60 + "\n")

    db = DatabaseManager()
    print(f"Database: {db.database_url}")

    if not db.health_check():
        print("❌ Database connection failed!")
        print("\nCheck DATABASE_URL in .env, or unset it to use the local SQLite file")
        sys.exit(1)

    db.create_tables()
    print("✅ settings table ready")
    show_settings(db)


def reset_database():
    """
    Drop and recreate the settings table.

    WARNING: The account and API key must be stored again afterwards!
    """
    print("="*60)
    print("⚠️  SETTINGS RESET WARNING ⚠️")
    print("="*60)
    print("\nThis forgets the stored account, API key and selected player.")
    print("Continue? (yes/no): ", end="")

    if input().strip().lower() != 'yes':
        print("Reset cancelled.")
        return

    try:
        db = DatabaseManager()
        db.drop_tables()
        db.create_tables()
    except Exception as e:
        print(f"❌ Error resetting settings: {e}")
        sys.exit(1)

    print("\n✅ Settings cleared")
    show_settings(db)


def main():
    """Main function to handle command line arguments."""
    if len(sys.argv) > 1 and sys.argv[1] == '--reset':
        reset_database()
    else:
        init_database()


if __name__ == "__main__":
    main()
