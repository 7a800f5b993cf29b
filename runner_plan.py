#!/usr/bin/env python3
"""
Generate training plans and export them to calendars.

Usage:
    ./runner_plan.py generate request.json -o plan.json --plan-id 1 --user-id runner_42
    ./runner_plan.py ical plan.json -o training_plan.ics
    ./runner_plan.py links plan.json --week 1
    ./runner_plan.py summary plan.json
    ./runner_plan.py list plan.json 3  # Show week 3
"""

import argparse
import json
import os
import sys

from dotenv import load_dotenv

# Load environment variables from .env file before reading calendar settings
load_dotenv()

from training_plans import CalendarSync, InputShapeError, PlanGenerator, PlanInput, PlanNotFound


def read_json(path):
    with open(path, 'r') as f:
        return json.load(f)


def write_output(path, content):
    output_dir = os.path.dirname(path)
    if output_dir and not os.path.exists(output_dir):
        os.makedirs(output_dir)
    with open(path, 'w', newline='') as f:
        f.write(content)


class PlanTool:
    def __init__(self, timezone=None):
        self.generator = PlanGenerator()
        self.sync = CalendarSync(timezone=timezone)

    def load_plan(self, plan_path, user_id=None):
        """Read a stored plan record, checking ownership when a user is given."""
        record = read_json(plan_path) if os.path.exists(plan_path) else None
        if user_id is not None or record is None:
            return self.sync.authorize(record, user_id)
        return self.sync.load_record(record)

    def generate(self, request_path, output_path, plan_id=None, user_id=None):
        plan_input = PlanInput.from_dict(read_json(request_path))
        record = self.generator.build_plan_record(plan_input, plan_id=plan_id, user_id=user_id)
        write_output(output_path, json.dumps(record, indent=2, ensure_ascii=False))

        print(f"✓ Plan generated: {output_path}")
        print(f"  - {record['planName']}")
        print(f"  - {record['startDate']} to {record['endDate']}")
        return record

    def export_ical(self, plan_path, output_path, user_id=None):
        plan = self.load_plan(plan_path, user_id)
        events = self.sync.extract_events(plan)
        write_output(output_path, self.sync.generate_icalendar(events, plan.plan_name))

        print(f"✓ Calendar generated: {output_path}")
        print(f"  - {len(events)} workouts over {plan.duration} weeks")
        return events

    def print_links(self, plan_path, week=None, feed_url=None, user_id=None):
        plan = self.load_plan(plan_path, user_id)
        events = self.sync.extract_events(plan)
        if week is not None:
            events = [event for event in events if f"-w{week}-" in event.id]

        for event in events:
            print(f"📅 {event.start:%Y-%m-%d %H:%M} {event.title}")
            print(f"   Google:  {self.sync.google_calendar_url(event)}")
            print(f"   Outlook: {self.sync.outlook_url(event)}")
            print()

        if feed_url:
            print("🔗 Subscribe to the whole plan:")
            print(f"   Google:  {self.sync.google_subscribe_url(feed_url)}")
            print(f"   Outlook: {self.sync.outlook_subscribe_url(feed_url, plan.plan_name)}")
        return events

    def print_summary(self, plan_path, user_id=None):
        plan = self.load_plan(plan_path, user_id)
        summary = self.sync.sync_summary(plan)

        print(f"\n📋 {summary['planName']}")
        print(f"  {summary['startDate']} to {summary['endDate']} ({summary['duration']} weeks)")
        print(f"  - {summary['totalWorkouts']} workouts")
        print(f"  - ~{summary['weeklyWorkouts']} per week")
        return summary

    def list_week(self, plan_path, week=1, user_id=None):
        """List one week's workouts."""
        plan = self.load_plan(plan_path, user_id)
        week_plan = plan.weekly_schedule.get(week)
        if week_plan is None:
            print(f"✗ Week {week} is not part of this plan ({plan.duration} weeks)")
            return []

        workouts = self.sync.week_workouts(plan, week)
        print(f"\n📅 Week {week}: {week_plan.focus} ({week_plan.total_distance})\n")
        for workout in workouts:
            status = "✅" if workout.get('completed') else "  "
            dist_str = f" ({workout['distance']})" if workout.get('distance') else ""
            print(f"{status} {workout['date']} {workout['day'].title()} - {workout['name']}{dist_str}")
            if workout.get('description'):
                print(f"         {workout['description']}")
            if workout.get('pace'):
                print(f"         ⏱  {workout['pace']}")
            print()
        return workouts


def build_parser():
    parser = argparse.ArgumentParser(
        description='Generate training plans and export them to calendars',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s generate request.json -o plan.json --plan-id 1 --user-id runner_42
  %(prog)s ical plan.json -o training_plan.ics
  %(prog)s links plan.json --week 1
  %(prog)s list plan.json 3
        """
    )
    parser.add_argument('--timezone', help='Calendar timezone (default: TRAINING_CALENDAR_TIMEZONE)')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # generate command
    gen_parser = subparsers.add_parser('generate', help='Generate a plan record from a request')
    gen_parser.add_argument('request', help='Plan request JSON file')
    gen_parser.add_argument('-o', '--output', default='training_plan.json', help='Output plan JSON file')
    gen_parser.add_argument('--plan-id', help='Plan id stored in the record')
    gen_parser.add_argument('--user-id', help='Owner stored in the record')

    # ical command
    ical_parser = subparsers.add_parser('ical', help='Export a plan as an .ics file')
    ical_parser.add_argument('plan', help='Plan JSON file')
    ical_parser.add_argument('-o', '--output', default='training_plan.ics', help='Output .ics file')
    ical_parser.add_argument('--user-id', help='Only export if the plan belongs to this user')

    # links command
    links_parser = subparsers.add_parser('links', help='Print Google/Outlook calendar links')
    links_parser.add_argument('plan', help='Plan JSON file')
    links_parser.add_argument('--week', type=int, help='Only show one week')
    links_parser.add_argument('--feed-url', help='Hosted .ics URL for subscription links')
    links_parser.add_argument('--user-id', help='Only show if the plan belongs to this user')

    # summary command
    summary_parser = subparsers.add_parser('summary', help='Show calendar sync summary')
    summary_parser.add_argument('plan', help='Plan JSON file')
    summary_parser.add_argument('--user-id', help='Only show if the plan belongs to this user')

    # list command
    list_parser = subparsers.add_parser('list', help="List a week's workouts")
    list_parser.add_argument('plan', help='Plan JSON file')
    list_parser.add_argument('week', type=int, nargs='?', default=1, help='Week number (default: 1)')
    list_parser.add_argument('--user-id', help='Only list if the plan belongs to this user')

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    tool = PlanTool(timezone=args.timezone)

    try:
        if args.command == 'generate':
            tool.generate(args.request, args.output, args.plan_id, args.user_id)
        elif args.command == 'ical':
            tool.export_ical(args.plan, args.output, args.user_id)
        elif args.command == 'links':
            tool.print_links(args.plan, args.week, args.feed_url, args.user_id)
        elif args.command == 'summary':
            tool.print_summary(args.plan, args.user_id)
        elif args.command == 'list':
            tool.list_week(args.plan, args.week, args.user_id)
    except PlanNotFound as e:
        print(f"✗ {e}")
        return 1
    except InputShapeError as e:
        print(f"✗ Invalid plan request: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
