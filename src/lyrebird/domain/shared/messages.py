"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Queue Errors
    CANNOT_MOVE_CURRENT = "Cannot move the current song"
    CANNOT_SWAP_CURRENT = "Cannot swap the current song"
    CANNOT_REMOVE_CURRENT = "Cannot remove the current song, use skip instead"
    NO_ITEM_AT_INDEX = "No item at index {index}"

    # Playback State Errors
    NOTHING_PLAYING = "Nothing is playing"
    ALREADY_PAUSED = "Already paused"
    NOT_PAUSED = "Not paused"
    DEAFEN_FAILED = "Failed to deafen"
    UNDEAFEN_FAILED = "Failed to undeafen"

    # Command Argument Errors
    PLAY_REQUIRES_URL = "Must provide a valid url"
    SEARCH_REQUIRES_TERMS = "Must provide something to search for"

    # Audio/Stream Errors
    NO_RESULTS = "No results for '{arg}'"
    NO_STREAM_URL = "No playable stream found for '{arg}'"

    # Restart Errors
    RESTART_NOT_OWNER = "Only the bot owner can restart the bot"
    RESTART_NOT_SUPERVISED = "Not run by the runner, cannot restart"
    RESTART_WRITE_FAILED = "Could not write the transfer file, restart aborted: {error}"
    SNAPSHOT_INVALID = "Transfer file does not match the snapshot schema ({errors} errors)"
    SNAPSHOT_UNREADABLE = "Cannot read transfer file {path}: {error}"

    # Supervisor Configuration Errors
    RUNNER_CONFIG_UNREADABLE = "Cannot read supervisor config {path}: {error}"
    RUNNER_CONFIG_INVALID = "Invalid supervisor config {path}: {error}"
    RUNNER_PROFILE_MISSING = "No [profiles.{mode}] table for the active mode"
    RUNNER_NO_STDOUT_PIPE = "Worker was started without a stdout pipe"

    # Settings Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Application Wiring Errors
    DISCORD_TOKEN_REQUIRED = "DISCORD_TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class LogTemplates:
    """Log message templates.

    Use these with logger.info(), logger.error(), etc. and pass values as
    parameters so formatting stays lazy.
    """

    # Queue Operations
    QUEUE_MOVED = "Moved item from %s to %s in guild %s"
    QUEUE_SWAPPED = "Swapped items %s and %s in guild %s"
    QUEUE_REMOVED = "Removed item %s at position %s in guild %s"
    QUEUE_SHUFFLED = "Shuffled queue in guild %s"
    QUEUE_CLEARED = "Cleared %s items from queue in guild %s"
    QUEUE_SKIP_NOTHING_STREAMING = "Skip in guild %s found nothing streaming"

    # Item Lifecycle
    ITEM_ENQUEUED = "Enqueued item %s at position %s in guild %s"
    ITEM_STARTED = "Started item %s in guild %s"
    ITEM_PLAY_FAILED = "Transport refused item %s in guild %s, dropping it"
    ITEM_LOOPED = "Looping item %s in guild %s"
    TRACK_END_NO_SESSION = "Track ended in guild %s with no session, ignoring"
    BATCH_ITEM_FAILED = "Batch enqueue skipped %r in guild %s: %s"
    BATCH_FINISHED = "Batch enqueue in guild %s: %s queued, %s failed"

    # Sessions
    SESSION_JOINED = "Joined guild %s on channel %s"
    SESSION_LEFT = "Left guild %s"
    SESSION_DRAINED = "Drained guild %s with %s replayable items"
    SESSION_DRAIN_PAUSE_SKIPPED = "Not pausing guild %s before drain: %s"
    SESSIONS_DRAINED = "Drained %s sessions"
    REGISTRY_REOPENED = "Registry reopened, accepting joins again"

    # Pagination
    PAGINATION_STARTED = "Queue view opened in guild %s on page %s"
    PAGINATION_EVENT_AFTER_END = "Ignoring navigation event %r, view is %s"
    PAGINATION_UNKNOWN_EVENT = "Ignoring unknown navigation event %r"
    PAGINATION_EXPIRED = "Queue view on message %s expired"
    PAGINATION_CLOSED = "Queue view on message %s closed"
    PAGINATION_RENDER_FAILED = "Failed to edit queue view message %s: %s"
    SEARCH_VIEW_CLEANUP_FAILED = "Failed to remove the search menu from message %s: %s"

    # Restart Hand-over
    RESTART_REQUESTED = "Restart requested by %s"
    RESTART_SIGNALLED = "Restart signalled with transfer file %s"
    RESTART_WRITE_FAILED = "Failed to write transfer file, replaying %s sessions in place: %s"
    TRANSFER_FILE_WRITTEN = "Wrote transfer file %s with %s sessions"
    TRANSFER_FILE_CONSUMED = "Consumed transfer file %s with %s sessions"
    TRANSFER_FILE_DELETE_FAILED = "Failed to delete transfer file %s: %s"
    RECOVERY_STARTED = "Recovering sessions from %s"
    RECOVERY_FILE_INVALID = "Transfer file %s is unusable, starting cold: %s"
    REPLAY_JOIN_FAILED = "Replay could not rejoin guild %s channel %s: %s"
    REPLAY_ITEM_FAILED = "Replay could not enqueue %r in guild %s: %s"
    REPLAY_ITEM_TIMEOUT = "Replay of %r in guild %s timed out after %ss"
    REPLAY_FINISHED = "Replay finished: %s rooms joined, %s items enqueued, %s rooms failed, %s items failed"

    # Supervisor
    RUNNER_SPAWNED = "Started worker %s (pid %s, recover path %s)"
    RUNNER_CHILD_EXITED = "Worker exited with code %s"
    RUNNER_RESTARTING = "Worker requested restart with transfer file %s"
    RUNNER_CONFIG_FAILED = "Supervisor configuration error: %s"
    RUNNER_SPAWN_FAILED = "Failed to start worker %s: %s"

    # Voice/Audio Operations
    VOICE_CONNECTED = "Connected to voice channel %s in %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error: %r"
    VOICE_NOT_CONNECTED = "Not connected to voice in guild %s"
    VOICE_NO_STREAM_URL = "Item %s has no stream URL"
    VOICE_DEAFEN_CHANGED = "Self-deafen set to %s in guild %s"
    GUILD_NOT_FOUND = "Guild %s not found"
    CHANNEL_NOT_VOICE = "Channel %s is not a voice channel"

    # Playback Operations
    PLAYBACK_STARTED = "Started playing '%s' in guild %s"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_ERROR = "Playback error in guild %s: %s"
    PLAYBACK_NO_CALLBACK = "No track end callback set for guild %s"
    PLAYBACK_CALLING_CALLBACK = "Calling track end callback for guild %s"
    PLAYBACK_CALLBACK_ERROR = "Error in track end callback for guild %s"

    # Resolution
    YTDLP_FAILED_RESOLVE = "Failed to resolve %r: %s"
    YTDLP_NO_STREAM_URL = "No stream URL found for %r"
    YTDLP_FAILED_SEARCH = "Failed to search for %r: %s"
    YTDLP_SEARCH_FINISHED = "Search for %r returned %s results"

    # Application Lifecycle
    LOGGING_CONFIG_FALLBACK = "Could not load %s, falling back to basic config"
    BOT_STARTING = "Starting Lyrebird (%s)"
    BOT_SETUP = "Setting up bot..."
    BOT_CONTAINER_INITIALIZED = "Container initialized successfully"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"

    # Bot Cog Management
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_COGS_LOADED_SUMMARY = "Cogs loaded: %s success, %s failed"

    # Bot Command Sync
    BOT_SYNCED_GUILD = "Synced %s commands to guild %s"
    BOT_SYNC_GUILD_FAILED = "Failed to sync to guild %s: %s"

    # Bot Error Handling
    BOT_SLASH_COMMAND_ERROR = "Slash command error in '%s': %s"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message to user"
    ADMIN_COMMAND_FAILED = "Admin command failed"


class DiscordUIMessages:
    """User-facing strings sent back to Discord."""

    # Voice
    ACTION_JOINED = "Joined"
    ACTION_LEFT = "Left voice channel"
    ACTION_DEAFENED = "Deafened"
    ACTION_UNDEAFENED = "Undeafened"

    # Playback
    ACTION_QUEUED = "Queued: {track} (position {position})"
    ACTION_NOW_PLAYING = "\U0001f3b5 Now playing: {track}"
    ACTION_SKIPPED = "⏭️ Skipped"
    ACTION_PAUSED = "⏸️ Paused"
    ACTION_RESUMED = "▶️ Resumed"
    ACTION_LOOP_ON = "\U0001f502 Looping the current item"
    ACTION_LOOP_OFF = "➡️ Loop off"

    # Search
    SEARCH_HEADER = "Search results for \"{query}\""
    SEARCH_PLACEHOLDER = "Pick what to queue"
    ACTION_BATCH_QUEUED = "Queued {queued} of {total} selected items"

    # Queue
    ACTION_MOVED = "Moved {track} to position {position}"
    ACTION_SWAPPED = "Swapped positions {a} and {b}"
    ACTION_REMOVED = "Removed: {track}"
    ACTION_QUEUE_CLEARED = "\U0001f5d1️ Cleared {count} items from the queue."
    ACTION_SHUFFLED = "\U0001f500 Shuffled the queue."

    # Queue Listing
    QUEUE_EMPTY = "queue is empty"
    QUEUE_OUT_OF_RANGE = "Index out of bounds."
    QUEUE_NOW_PLAYING = "**Now Playing**"
    QUEUE_TIME_UNAVAILABLE = "Error getting time"

    # Admin
    ACTION_RESTARTING = "\U0001f504 Restarting..."
    SUCCESS_GENERIC = "Done."
    SUCCESS_SYNCED_GLOBAL = "✅ Synced {count} slash commands globally."
    SUCCESS_SYNCED_GUILD = "✅ Synced {count} slash commands to this server."

    # State Messages
    STATE_SERVER_ONLY = "This command can only be used in a server."
    STATE_VERIFY_VOICE_FAILED = "Could not verify your voice state."
    STATE_NOT_IN_VOICE = "Not in a voice channel"
    STATE_ALREADY_DEAFENED = "Already deafened"
    STATE_QUEUE_ALREADY_EMPTY = "The queue is already empty."

    # Error Messages
    ERROR_JOIN_FAILED = "failed to join: {error}"
    ERROR_AUTOJOIN_FAILED = "failed to autojoin: {error}"
    ERROR_REQUIRES_OWNER = "❌ Requires bot owner."
    ERROR_COMMAND_FAILED_SEE_LOGS = "❌ Command failed. See logs."
    ERROR_OCCURRED = "❌ An error occurred: {error}"
    ERROR_PLAYBACK_FAILED = "❌ Could not start {track}"
