"""
Niche Growth Dashboard

This is the main entry point for the Niche Growth Dashboard.
It wires storage, the statistics API, the reasoning provider and the services
together, and exposes every dashboard action as a CLI subcommand that prints
JSON.

Exit codes: 0 on success, 1 for a handled error (its message is printed
verbatim), 2 for anything unexpected.
"""

import sys
import json
import argparse
import logging
import dataclasses
from typing import Optional, List, Dict, Any

from config import settings
from config.validators import validate_settings, get_config_summary
from config.niches import NICHES
from data.database import db
from data.models import CreatorResult, Platform
from services.ai_client import create_reasoning_client
from services.ai_service import AIService
from services.analysis_service import AnalysisService
from services.creator_service import CreatorService
from services.generation_service import GenerationService
from services.mock_data import MockDataGenerator
from services.social_service import create_platform_services
from services.statistics_api import StatisticsAPIClient
from services.user_service import UserService
from utils.exceptions import GrowthDashboardError, InvalidInputError, MissingIdentifierError
from utils.logger import get_logger, setup_file_logging

# Set up logging
logger = get_logger(__name__)


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses (recursively) into plain dicts for JSON output."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, list):
        return [to_jsonable(v) for v in value]
    return value


class GrowthDashboard:
    """
    Main application class for the Niche Growth Dashboard.

    This class owns the lifecycle of the storage connection and the external
    clients, and hands them to the services. The reasoning client is only
    built when an AI-backed action is first used.
    """

    def __init__(self, storage=None, reasoning_client=None, platform_services=None,
                 validate: bool = True):
        """
        Initialize the dashboard.

        Args:
            storage: GrowthStorage implementation (defaults to the SQL Server connection)
            reasoning_client: ReasoningClient (defaults to the configured LLM provider)
            platform_services: Platform services keyed by Platform
            validate: Run validate_settings() first
        """
        if validate:
            validate_settings(require_database=storage is None)
            logger.info(f"Configuration: {get_config_summary()}")

        self.storage = storage or db
        self._reasoning_client = reasoning_client
        self._ai_service = None
        self._analysis = None
        self._generation = None

        if platform_services is None:
            platform_services = create_platform_services(
                StatisticsAPIClient(), MockDataGenerator(settings.MOCK_DATA_SEED)
            )

        self.users = UserService(self.storage)
        self.creators = CreatorService(self.storage, platform_services)

    @property
    def ai_service(self) -> AIService:
        if self._ai_service is None:
            if self._reasoning_client is None:
                self._reasoning_client = create_reasoning_client()
            self._ai_service = AIService(self._reasoning_client)
        return self._ai_service

    @property
    def analysis(self) -> AnalysisService:
        if self._analysis is None:
            self._analysis = AnalysisService(self.storage, self.ai_service)
        return self._analysis

    @property
    def generation(self) -> GenerationService:
        if self._generation is None:
            self._generation = GenerationService(self.storage, self.ai_service)
        return self._generation

    def close(self) -> None:
        close = getattr(self.storage, "close", None)
        if close:
            close()

    # =========================================================================
    # Actions (one per CLI subcommand)
    # =========================================================================

    def onboard(self, user_id: str, niche: str, platforms: List[str],
                social_handle: Optional[str] = None) -> Dict[str, Any]:
        user = self.users.complete_onboarding(user_id, niche, platforms, social_handle)
        return {"success": True, "user": to_jsonable(user)}

    def discover(self, user_id: str) -> Dict[str, Any]:
        return {"creators": to_jsonable(self.creators.discover_for_user(user_id))}

    def track(self, user_id: str, creator: CreatorResult) -> Dict[str, Any]:
        tracked, posts_added = self.creators.track_creator(user_id, creator)
        return {"creator": to_jsonable(tracked), "postsAdded": posts_added}

    def untrack(self, creator_id) -> Dict[str, Any]:
        self.creators.untrack_creator(creator_id)
        return {"success": True}

    def list_creators(self, user_id: str) -> Dict[str, Any]:
        return {"creators": to_jsonable(self.creators.list_tracked_creators(user_id))}

    def analyze(self, user_id: str) -> Dict[str, Any]:
        return {"analyzed": len(self.analysis.analyze_unanalyzed_posts(user_id))}

    def generate_insights(self, user_id: str) -> Dict[str, Any]:
        return {"generated": self.analysis.generate_insights_for_user(user_id)}

    def list_insights(self, user_id: str) -> Dict[str, Any]:
        return {"insights": to_jsonable(self.analysis.list_insights(user_id))}

    def generate_post(self, user_id: str, platform: Optional[str], content_format: Optional[str] = None,
                      topic: Optional[str] = None) -> Dict[str, Any]:
        post = self.generation.generate_for_user(user_id, platform, content_format, topic)
        return {"post": to_jsonable(post)}

    def history(self, user_id: str) -> Dict[str, Any]:
        return {"posts": to_jsonable(self.generation.list_generated_posts(user_id))}


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Niche Growth Dashboard')
    parser.add_argument('--user', type=str, default=None, help='User id to act for')
    parser.add_argument('--log-file', type=str, default=settings.LOG_FILE, help='Log file path')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default='INFO', help='Logging level')
    parser.add_argument('--init-schema', action='store_true',
                        help='Create any missing database tables before running the command')

    sub = parser.add_subparsers(dest='command', required=True)

    onboard = sub.add_parser('onboard', help='Set niche, platforms and handle')
    onboard.add_argument('--niche', type=str, required=True,
                         help=f"Your niche, e.g. one of: {', '.join(NICHES)}")
    onboard.add_argument('--platforms', type=str, default=','.join(settings.DEFAULT_PLATFORMS),
                         help='Comma-separated list of platforms (instagram,tiktok)')
    onboard.add_argument('--handle', type=str, default=None, help='Your own social handle')

    sub.add_parser('discover', help='Find top creators in your niche')

    track = sub.add_parser('track', help='Track a creator and ingest their recent posts')
    track.add_argument('--platform', type=str, required=True, choices=settings.SUPPORTED_PLATFORMS)
    track.add_argument('--handle', type=str, required=True)
    track.add_argument('--display-name', type=str, default='')
    track.add_argument('--followers', type=int, default=0)
    track.add_argument('--bio', type=str, default='')
    track.add_argument('--avatar-url', type=str, default='')
    track.add_argument('--cid', type=str, default=None, help='Statistics API creator id, if known')

    untrack = sub.add_parser('untrack', help='Stop tracking a creator')
    untrack.add_argument('--id', type=str, default=None, help='Tracked creator id')

    sub.add_parser('creators', help='List tracked creators with their top posts')
    sub.add_parser('analyze', help='Analyze the next batch of unanalyzed posts')

    insights = sub.add_parser('insights', help='List niche insights')
    insights.add_argument('--generate', action='store_true', help='Regenerate insights first')

    generate = sub.add_parser('generate', help='Generate a post from your insights')
    generate.add_argument('--platform', type=str, default=None)
    generate.add_argument('--format', dest='content_format', type=str, default=None)
    generate.add_argument('--topic', type=str, default=None)

    sub.add_parser('history', help='List recently generated posts')

    return parser.parse_args(argv)


def run_command(dashboard: GrowthDashboard, args) -> Dict[str, Any]:
    """Dispatch a parsed command to the dashboard."""
    if args.command == 'untrack':
        if not args.id:
            raise MissingIdentifierError()
        return dashboard.untrack(args.id)

    if not args.user:
        raise InvalidInputError("--user is required")

    if args.command == 'onboard':
        platforms = [p.strip().lower() for p in args.platforms.split(',') if p.strip()]
        return dashboard.onboard(args.user, args.niche, platforms, args.handle)
    if args.command == 'discover':
        return dashboard.discover(args.user)
    if args.command == 'track':
        creator = CreatorResult(
            handle=args.handle.lstrip('@'),
            display_name=args.display_name or args.handle.lstrip('@'),
            platform=Platform.from_value(args.platform),
            follower_count=args.followers,
            bio=args.bio,
            avatar_url=args.avatar_url,
            cid=args.cid,
        )
        return dashboard.track(args.user, creator)
    if args.command == 'creators':
        return dashboard.list_creators(args.user)
    if args.command == 'analyze':
        return dashboard.analyze(args.user)
    if args.command == 'insights':
        if args.generate:
            result = dashboard.generate_insights(args.user)
            result.update(dashboard.list_insights(args.user))
            return result
        return dashboard.list_insights(args.user)
    if args.command == 'generate':
        return dashboard.generate_post(args.user, args.platform, args.content_format, args.topic)
    if args.command == 'history':
        return dashboard.history(args.user)

    raise InvalidInputError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None, dashboard: Optional[GrowthDashboard] = None) -> int:
    """Main entry point for the application."""
    # Parse command line arguments
    args = parse_arguments(argv)

    # Set up logging
    log_level = getattr(logging, args.log_level)
    setup_file_logging(args.log_file, log_level)

    logger.info(f"Starting Niche Growth Dashboard command: {args.command}")

    try:
        dashboard = dashboard or GrowthDashboard()
        if args.init_schema:
            dashboard.storage.initialize_schema()
        result = run_command(dashboard, args)
        print(json.dumps(result, indent=2, default=str))
        exit_code = 0

    except GrowthDashboardError as e:
        logger.error(f"{args.command} failed: {e}")
        print(json.dumps({"error": str(e)}, indent=2))
        exit_code = 1

    except Exception as e:
        logger.error(f"Unhandled exception in {args.command}: {e}", exc_info=True)
        print(json.dumps({"error": "Unexpected error"}, indent=2))
        exit_code = 2

    finally:
        if dashboard is not None:
            dashboard.close()

    logger.info(f"Niche Growth Dashboard finished with exit code {exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
