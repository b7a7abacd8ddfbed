"""
plugins/magic8ball/plugin.py

Magic 8-Ball launcher plugin.

NATS-based plugin that handles:
- launcher.query.8ball - Result list for the current search text
- launcher.context.8ball - Context menu entries for a selected result
- launcher.settings.8ball - Settings options read/update
- launcher.command.8ball.ask - Ask the 8-ball a question
- launcher.event.8ball.shaking - Emitted while the ball is shaking (animations on)
- launcher.event.8ball.consulted - Event emission for analytics
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from nats.aio.client import Client as NATS

from .providers.eightballapi import EightBallAPIProvider
from .responses import EightBallResponse
from .results import Action, ContextMenuResult, QueryResult
from .service import EightBallService, FortuneContext


class EightBallPlugin:
    """
    Magic 8-Ball launcher plugin.

    Type a yes-or-no question into the launcher and press Enter to receive a
    fortune from the 8Ball API, or from the local catalog when the API is
    unavailable.

    Configuration:
        enable_animations: Shake the ball before answering (default: true)
        enable_sound_effects: Play the shake sound during animations (default: true)
        use_biased_responses: Bias answers by question sentiment (default: false)
        api_base_url: 8Ball API root (default: https://www.eightballapi.com)
        api_timeout: Request timeout in seconds (default: 10.0)
        proxy: Optional proxy URL for API requests
        shake_seconds: Minimum shake duration when animating (default: 1.5)
        emit_events: Whether to emit analytics events (default: true)
        require_question: Whether to require a question (default: true)
        icon_path: Icon shown next to results

    NATS Subjects:
        Subscribe: launcher.query.8ball, launcher.context.8ball,
                   launcher.settings.8ball, launcher.command.8ball.ask
        Publish: launcher.event.8ball.shaking, launcher.event.8ball.consulted
    """

    # Plugin metadata
    NAME = "Magic 8-Ball"
    NAMESPACE = "8ball"
    VERSION = "1.0.0"
    DESCRIPTION = "Ask the Magic 8-Ball a yes-or-no question and receive a fortune-telling response"

    # NATS subjects
    SUBJECT_QUERY = "launcher.query.8ball"
    SUBJECT_CONTEXT = "launcher.context.8ball"
    SUBJECT_SETTINGS = "launcher.settings.8ball"
    SUBJECT_ASK = "launcher.command.8ball.ask"
    EVENT_SHAKING = "launcher.event.8ball.shaking"
    EVENT_CONSULTED = "launcher.event.8ball.consulted"

    # Host settings option keys
    OPTION_ANIMATIONS = "EnableAnimations"
    OPTION_SOUND = "EnableSoundEffects"
    OPTION_BIASED = "UseBiasedResponses"

    DEFAULT_ICON = "Images/magic8ball.dark.png"
    DEFAULT_QUESTION = "what does fate hold?"
    INVALID_REQUEST = {"success": False, "error": "Invalid request format"}

    def __init__(
        self,
        nats_client: NATS,
        config: Optional[Dict[str, Any]] = None,
        service: Optional[EightBallService] = None,
    ):
        """
        Initialize the 8-Ball plugin.

        Args:
            nats_client: Connected NATS client for messaging.
            config: Optional configuration dictionary.
            service: Optional pre-built EightBallService (built from config if omitted).
        """
        self.nats = nats_client
        self.config = config or {}
        self.logger = logging.getLogger(f"plugin.{self.NAMESPACE}")

        # Settings exposed to the host
        self.enable_animations = self.config.get("enable_animations", True)
        self.enable_sound_effects = self.config.get("enable_sound_effects", True)
        self.use_biased_responses = self.config.get("use_biased_responses", False)

        # Configuration with defaults
        self.shake_seconds = self.config.get("shake_seconds", 1.5)
        self.emit_events = self.config.get("emit_events", True)
        self.require_question = self.config.get("require_question", True)
        self.icon_path = self.config.get("icon_path", self.DEFAULT_ICON)

        if service is None:
            provider = EightBallAPIProvider(
                base_url=self.config.get("api_base_url", EightBallAPIProvider.BASE_URL),
                timeout=self.config.get("api_timeout", EightBallAPIProvider.DEFAULT_TIMEOUT),
                proxy=self.config.get("proxy"),
            )
            service = EightBallService(FortuneContext(provider=provider))
        self.service = service

        # Subscription tracking
        self._subscriptions = []
        self._ask_tasks = set()
        self._disposed = False

    async def initialize(self) -> None:
        """
        Initialize the plugin and subscribe to NATS subjects.

        Should be called after construction to set up message handlers.
        """
        handlers = {
            self.SUBJECT_QUERY: self._handle_query,
            self.SUBJECT_CONTEXT: self._handle_context,
            self.SUBJECT_SETTINGS: self._handle_settings,
            self.SUBJECT_ASK: self._dispatch_ask,
        }
        for subject, handler in handlers.items():
            sub = await self.nats.subscribe(subject, cb=handler)
            self._subscriptions.append(sub)
        self.logger.info(f"8ball plugin v{self.VERSION} loaded")

    async def shutdown(self) -> None:
        """
        Shutdown the plugin and cleanup resources.

        Unsubscribes from all NATS subjects and closes the API client.
        Safe to call more than once.
        """
        if self._disposed:
            return

        for sub in self._subscriptions:
            await sub.unsubscribe()
        self._subscriptions.clear()

        # Abandon asks still waiting on the API or the shake delay
        pending = list(self._ask_tasks)
        for task in pending:
            task.cancel()
        for task in pending:
            try:
                await task
            except asyncio.CancelledError:
                pass

        await self.service.close()
        self._disposed = True
        self.logger.info("8ball plugin unloaded")

    # =========================================================================
    # Launcher API
    # =========================================================================

    def query(self, search: str, delayed_execution: Optional[bool] = None) -> List[QueryResult]:
        """
        Build the result list for the launcher's search text.

        Args:
            search: Current search text (the question).
            delayed_execution: When given, only a delayed query with a
                non-empty search produces results.

        Returns:
            List of QueryResult, empty when there is nothing to show.
        """
        search = search or ""
        self.logger.debug(f"Query: {search}")

        if delayed_execution is not None:
            if delayed_execution and search.strip():
                return self.query(search)
            return []

        if not search.strip():
            return [
                QueryResult(
                    title="Ask the Magic 8-Ball a question",
                    subtitle="Type a yes-or-no question and press Enter",
                    icon=self.icon_path,
                )
            ]

        return [
            QueryResult(
                title=search,
                subtitle="Press Enter to ask the Magic 8-Ball",
                query_text=search,
                icon=self.icon_path,
                action=self._ask_action(search, self.use_biased_responses),
                context_data=search,
            )
        ]

    def load_context_menus(self, context_data: Any) -> List[ContextMenuResult]:
        """
        Build context menu entries for a selected result.

        Args:
            context_data: The result's context data; only a question string
                produces entries.

        Returns:
            "Ask" and "Use biased response" entries, or an empty list.
        """
        if not isinstance(context_data, str):
            return []

        return [
            ContextMenuResult(
                plugin_name=self.NAME,
                title="Ask (Enter)",
                glyph="\uE8AF",  # Question
                accelerator_key="Enter",
                action=self._ask_action(context_data, False),
            ),
            ContextMenuResult(
                plugin_name=self.NAME,
                title="Use biased response (Ctrl+Enter)",
                glyph="\uE8C5",  # Filter
                accelerator_key="Enter",
                accelerator_modifiers="Control",
                action=self._ask_action(context_data, True),
            ),
        ]

    def additional_options(self) -> List[Dict[str, Any]]:
        """
        Describe the plugin's settings for the host settings UI.

        Returns:
            List of checkbox option dicts with their current values.
        """
        return [
            {
                "key": self.OPTION_ANIMATIONS,
                "display_label": "Enable animations",
                "display_description": "Show animation while waiting for a response",
                "type": "checkbox",
                "value": self.enable_animations,
            },
            {
                "key": self.OPTION_SOUND,
                "display_label": "Enable sound effects",
                "display_description": "Play sound effects during animations",
                "type": "checkbox",
                "value": self.enable_sound_effects,
            },
            {
                "key": self.OPTION_BIASED,
                "display_label": "Use biased responses",
                "display_description": "Analyze your question to provide more relevant responses",
                "type": "checkbox",
                "value": self.use_biased_responses,
            },
        ]

    def update_settings(self, options: Dict[str, Any]) -> None:
        """
        Apply settings from the host. Missing keys reset to their defaults.

        Args:
            options: Mapping of option key to value.
        """
        self.logger.info("UpdateSettings")
        self.enable_animations = bool(options.get(self.OPTION_ANIMATIONS, True))
        self.enable_sound_effects = bool(options.get(self.OPTION_SOUND, True))
        self.use_biased_responses = bool(options.get(self.OPTION_BIASED, False))

    def _ask_action(self, question: str, biased: bool) -> Action:
        return Action(
            subject=self.SUBJECT_ASK,
            payload={"question": question, "biased": biased},
        )

    # =========================================================================
    # Direct API (for programmatic access)
    # =========================================================================

    async def ask(self, question: str, biased: Optional[bool] = None) -> EightBallResponse:
        """
        Consult the 8-ball directly.

        When animations are enabled, a shaking event is published and the
        answer is held back for at least shake_seconds.

        Args:
            question: The question to ask.
            biased: Override for the use_biased_responses setting. Anything
                other than a bool falls back to the setting.

        Returns:
            EightBallResponse with reading, category and source.
        """
        use_biased = biased if isinstance(biased, bool) else self.use_biased_responses

        if not self.enable_animations:
            return await self.service.get_response(question, use_biased)

        await self._emit_shaking_event(question)
        response, _ = await asyncio.gather(
            self.service.get_response(question, use_biased),
            asyncio.sleep(self.shake_seconds),
        )
        return response

    async def ask_formatted(self, question: str, biased: Optional[bool] = None) -> str:
        """
        Consult the 8-ball and get a formatted response string.

        Args:
            question: The question to ask.
            biased: Override for the use_biased_responses setting.

        Returns:
            Formatted response string ready for display.
        """
        response = await self.ask(question, biased)
        return response.format(question)

    # =========================================================================
    # NATS handlers
    # =========================================================================

    async def _handle_query(self, msg) -> None:
        """
        Handle launcher query requests.

        Message format (incoming):
        {"search": "question text", "delayed": true/false (optional)}

        Response format (outgoing):
        {"success": true, "results": [...]}
        """
        def build(data: dict) -> dict:
            delayed = data.get("delayed")
            results = self.query(str(data.get("search", "")), delayed)
            return {"success": True, "results": [r.to_dict() for r in results]}

        await self._serve(msg, build)

    async def _handle_context(self, msg) -> None:
        """
        Handle context menu requests.

        Message format (incoming):
        {"context_data": "question text"}
        """
        def build(data: dict) -> dict:
            menus = self.load_context_menus(data.get("context_data"))
            return {"success": True, "results": [m.to_dict() for m in menus]}

        await self._serve(msg, build)

    async def _handle_settings(self, msg) -> None:
        """
        Handle settings requests.

        Message format (incoming):
        {"options": {"EnableAnimations": true, ...}} to update, or {} to read.
        """
        def build(data: dict) -> dict:
            options = data.get("options")
            if options is not None:
                if not isinstance(options, dict):
                    return {"success": False, "error": "options must be an object"}
                self.update_settings(options)
            return {"success": True, "options": self.additional_options()}

        await self._serve(msg, build)

    async def _serve(self, msg, build: Callable[[dict], dict]) -> None:
        try:
            data = self._decode(msg)
            if data is None:
                await self._reply(msg.reply, self.INVALID_REQUEST)
                return
            response = build(data)
            await self._reply(data.get("reply_to") or msg.reply, response)
        except Exception as e:
            self.logger.exception(f"Error handling 8ball request on {msg.subject}: {e}")
            await self._reply(msg.reply, {"success": False, "error": "An error occurred in the 8-ball plugin"})

    def _decode(self, msg) -> Optional[dict]:
        """Decode a JSON object request, or return None if it is malformed."""
        try:
            data = json.loads(msg.data.decode())
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            self.logger.error(f"Invalid JSON in 8ball request: {e}")
            return None
        if not isinstance(data, dict):
            self.logger.error(f"8ball request is not a JSON object: {data!r}")
            return None
        return data

    async def _dispatch_ask(self, msg) -> None:
        """Run _handle_ask in its own task; nats-py delivers a subscription's messages one at a time."""
        task = asyncio.create_task(self._handle_ask(msg))
        self._ask_tasks.add(task)
        task.add_done_callback(self._ask_tasks.discard)

    async def _handle_ask(self, msg) -> None:
        """
        Handle incoming ask requests.

        Message format (incoming):
        {
            "question": "string",
            "biased": true/false (optional, defaults to the setting),
            "reply_to": "launcher.reply.xyz" (optional, else msg.reply)
        }

        Response format (outgoing):
        {
            "success": true/false,
            "result": {...} or "error": "..."
        }
        """
        try:
            data = self._decode(msg)
            if data is None:
                await self._reply(msg.reply, self.INVALID_REQUEST)
                return
            reply_to = data.get("reply_to") or msg.reply
            question = str(data.get("question") or "").strip()
            biased = data.get("biased")

            # Check if question is required
            if self.require_question and not question:
                response = {
                    "success": False,
                    "error": "🎱 The spirits need a question to answer! Type a yes-or-no question."
                }
                await self._reply(reply_to, response)
                return

            # If no question provided (and not required), use a default
            if not question:
                question = self.DEFAULT_QUESTION

            ball_response = await self.ask(question, biased)

            response = {
                "success": True,
                "result": {
                    "question": question,
                    "reading": ball_response.reading,
                    "type": ball_response.type,
                    "emoji": ball_response.emoji,
                    "source": ball_response.source,
                    "formatted": ball_response.format(question),
                }
            }
            await self._reply(reply_to, response)

            # Emit analytics event
            if self.emit_events:
                await self._emit_consulted_event(question, ball_response)

            self.logger.debug(
                f"8ball consulted: {ball_response.type} ({ball_response.source})"
            )

        except Exception as e:
            self.logger.exception(f"Error handling 8ball request: {e}")
            await self._reply(
                msg.reply,
                {"success": False, "error": "An error occurred consulting the 8-ball"},
            )

    async def _reply(self, reply_to: Optional[str], response: dict) -> None:
        if reply_to:
            await self.nats.publish(reply_to, json.dumps(response).encode())

    async def _emit_shaking_event(self, question: str) -> None:
        """
        Tell the presentation layer the ball is shaking.

        Args:
            question: The question being asked.
        """
        event = {
            "event": "8ball.shaking",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "question": question,
            "sound": self.enable_sound_effects,
        }
        await self.nats.publish(self.EVENT_SHAKING, json.dumps(event).encode())

    async def _emit_consulted_event(self, question: str, response: EightBallResponse) -> None:
        """
        Emit an 8ball.consulted event for analytics.

        Args:
            question: The question asked.
            response: The response given.
        """
        event = {
            "event": "8ball.consulted",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "question": question,
            "type": response.type,
            "source": response.source,
        }
        await self.nats.publish(self.EVENT_CONSULTED, json.dumps(event).encode())
