#!/usr/bin/env python3
"""
Remindlink CLI - Schedule and inspect recurring reminders through the backend API
"""
import argparse
import json
import os
import sys
import time
from typing import Any, Dict, List, Optional

import requests
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Backend API base URL
API_BASE = os.getenv("API_BASE_URL", "http://localhost:8000")

REQUEST_TIMEOUT_SECONDS = 10


# Command implementations - these call the backend API
def cmd_schedule(reminder_id: int, title: str, content: str = "", link: str = "",
                 delay_seconds: Optional[int] = None) -> str:
    """Schedule a recurring reminder"""
    try:
        payload: Dict[str, Any] = {
            "reminder_id": reminder_id,
            "title": title,
            "content": content,
            "link": link
        }
        if delay_seconds is not None:
            payload["fire_at_epoch_millis"] = int(time.time() * 1000) + delay_seconds * 1000

        response = requests.post(f"{API_BASE}/reminders", json=payload, timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
        return json.dumps({"success": True, "reminder": response.json()})
    except Exception as e:
        return json.dumps({"success": False, "error": str(e)})


def cmd_status(reminder_id: int) -> str:
    """Show the state of a reminder"""
    try:
        response = requests.get(f"{API_BASE}/reminders/{reminder_id}", timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
        return json.dumps(response.json())
    except Exception as e:
        return json.dumps({"error": str(e)})


def cmd_list() -> str:
    """List reminders with a pending cycle"""
    try:
        response = requests.get(f"{API_BASE}/reminders", timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
        return json.dumps({"reminders": response.json()})
    except Exception as e:
        return json.dumps({"error": str(e)})


def cmd_cancel(reminder_id: int) -> str:
    """Cancel a reminder"""
    try:
        response = requests.delete(f"{API_BASE}/reminders/{reminder_id}", timeout=REQUEST_TIMEOUT_SECONDS)
        if response.status_code == 404:
            return json.dumps({"success": False, "message": f"No pending reminder with id {reminder_id}"})
        response.raise_for_status()
        return json.dumps({"success": True, "message": f"Cancelled reminder {reminder_id}"})
    except Exception as e:
        return json.dumps({"success": False, "error": str(e)})


def cmd_send(title: str, content: str = "", link: Optional[str] = None, broadcast: bool = False) -> str:
    """Send a notification right away"""
    try:
        payload: Dict[str, Any] = {"title": title, "content": content}
        if link:
            payload["link"] = link
            payload["broadcast"] = broadcast

        response = requests.post(f"{API_BASE}/notifications", json=payload, timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
        return json.dumps({"success": True, "notification": response.json()})
    except Exception as e:
        return json.dumps({"success": False, "error": str(e)})


def cmd_cancel_all() -> str:
    """Clear all live notifications"""
    try:
        response = requests.post(f"{API_BASE}/notifications/cancel-all", timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
        return json.dumps({"success": True, "cancelled": response.json().get("cancelled", 0)})
    except Exception as e:
        return json.dumps({"success": False, "error": str(e)})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="remindlink", description="Recurring reminder client")
    commands = parser.add_subparsers(dest="command", required=True)

    schedule = commands.add_parser("schedule", help="Schedule a recurring reminder")
    schedule.add_argument("reminder_id", type=int)
    schedule.add_argument("title")
    schedule.add_argument("--content", default="")
    schedule.add_argument("--link", default="", help="Router path opened on click, e.g. /app/second")
    schedule.add_argument("--delay", type=int, dest="delay_seconds",
                          help="Seconds until the first fire (default: one reminder interval)")

    status = commands.add_parser("status", help="Show a reminder's state")
    status.add_argument("reminder_id", type=int)

    commands.add_parser("list", help="List pending reminders")

    cancel = commands.add_parser("cancel", help="Cancel a reminder")
    cancel.add_argument("reminder_id", type=int)

    send = commands.add_parser("send", help="Send a notification now")
    send.add_argument("title")
    send.add_argument("--content", default="")
    send.add_argument("--link")
    send.add_argument("--broadcast", action="store_true",
                      help="Resolve the link when the notification is clicked")

    commands.add_parser("cancel-all", help="Clear all live notifications")
    return parser


def run_command(args: argparse.Namespace) -> str:
    """Route parsed arguments to the matching command"""
    if args.command == "schedule":
        return cmd_schedule(args.reminder_id, args.title, args.content, args.link, args.delay_seconds)
    elif args.command == "status":
        return cmd_status(args.reminder_id)
    elif args.command == "list":
        return cmd_list()
    elif args.command == "cancel":
        return cmd_cancel(args.reminder_id)
    elif args.command == "send":
        return cmd_send(args.title, args.content, args.link, args.broadcast)
    elif args.command == "cancel-all":
        return cmd_cancel_all()
    return json.dumps({"error": f"Unknown command: {args.command}"})


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point"""
    args = build_parser().parse_args(argv)
    result = run_command(args)
    print(result)
    data = json.loads(result)
    return 1 if data.get("error") or data.get("success") is False else 0


if __name__ == "__main__":
    sys.exit(main())
