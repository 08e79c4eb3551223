"""
Live smoke check against a real GameLayer account.

This script verifies that:
1. Credentials are stored (or given through the environment)
2. The player directory loads
3. A player's profile and history load
4. The account-wide boards (leaderboard, quizzes) load

It only reads; nothing is created, claimed or submitted.

Usage:
    python -m scripts.check_api
    python -m scripts.check_api <player_ref>

Environment:
    GAMELAYER_ACCOUNT / GAMELAYER_API_KEY override the stored credentials.
"""

import asyncio
import os
import sys
from datetime import datetime

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from player_console.console import PlayerConsole  # noqa: E402


def check_credentials(console: PlayerConsole) -> bool:
    """Make sure credentials are available."""
    print("=" * 60)
    print("🧪 Check 1: Credentials")
    print("=" * 60)

    account = os.getenv("GAMELAYER_ACCOUNT")
    api_key = os.getenv("GAMELAYER_API_KEY")
    if account or api_key:
        console.edit_credentials(account=account, api_key=api_key)

    credentials = console.credentials
    if not credentials.is_complete:
        print("❌ No credentials found")
        print("\nStore them in the dashboard, or set in your .env file:")
        print("  GAMELAYER_ACCOUNT=your_account")
        print("  GAMELAYER_API_KEY=your_api_key")
        return False

    print(f"✅ Account: {credentials.account} // Key: {credentials.masked_key()}")
    return True


async def check_directory(console: PlayerConsole) -> bool:
    """Load players and teams."""
    print("\n" + "=" * 60)
    print("🧪 Check 2: Player Directory")
    print("=" * 60)

    directory = await console.load_directory()
    if not directory.players:
        print("⚠️  No players returned (see notifications above)")
        return False

    print(f"✅ {len(directory.players)} players, {len(directory.teams)} teams, "
          f"{len(console.missions.events)} events")
    for i, player in enumerate(directory.players[:10], 1):
        print(f"   {i}. {player.name} ({player.player_ref})")
    return True


async def check_player(console: PlayerConsole, player_ref: str) -> bool:
    """Load one player's profile, missions and history."""
    print("\n" + "=" * 60)
    print(f"🧪 Check 3: Player {player_ref}")
    print("=" * 60)

    console.select_player(player_ref)
    profile = await console.submit_selection()
    console.shutdown()
    if profile is None:
        print("❌ Profile failed to load")
        return False

    print(f"✅ {profile.name} // {profile.level.name} // team: {profile.team_name or '-'}")
    print(f"   Points: {profile.points} // Credits: {profile.credits}")
    print(f"   Missions: {len(console.missions.items)}")

    history = await console.load_history()
    if history is not None:
        print(f"   History: {len(history.missions)} missions, {len(history.achievements)} achievements, "
              f"{len(history.prizes)} prizes, {len(history.quizzes)} quizzes")
        for message in history.errors:
            print(f"   ⚠️  {message}")
    return True


async def check_boards(console: PlayerConsole) -> bool:
    """Load the account-wide boards."""
    print("\n" + "=" * 60)
    print("🧪 Check 4: Leaderboard & Quizzes")
    print("=" * 60)

    await console.activate_tab("leaderboard")
    await console.activate_tab("quizzes")

    print(f"✅ Leaderboard entries: {len(console.leaderboard.items)}")
    for entry in console.leaderboard.items[:5]:
        print(f"   {entry.rank}. {entry.name} - {entry.points}")
    print(f"✅ Quizzes: {len(console.quizzes.items)}")
    return True


async def run_checks(player_ref: str = None) -> bool:
    console = PlayerConsole()

    if not check_credentials(console):
        return False
    if not await check_directory(console):
        print("\n❌ Cannot proceed without a player directory")
        return False

    player_ref = player_ref or console.players[0].player_ref
    ok = await check_player(console, player_ref)
    ok = await check_boards(console) and ok
    return ok


def main():
    """Run all checks."""
    print("\n🚀 Checking GameLayer API")
    print(f"⏰ Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print()

    player_ref = sys.argv[1] if len(sys.argv) > 1 else None
    ok = asyncio.run(run_checks(player_ref))

    print("\n" + "=" * 60)
    print("✅ All checks passed" if ok else "⚠️  Some checks failed")
    print("=" * 60)
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
