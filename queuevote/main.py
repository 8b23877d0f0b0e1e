"""FastAPI application with Telegram bot integration."""

import asyncio
import logging
from contextlib import asynccontextmanager

from aiogram.fsm.storage.redis import RedisStorage
from fastapi import FastAPI, Request
from redis.asyncio import Redis

from queuevote.config import get_settings
from queuevote.spotify.auth import TokenStore
from queuevote.spotify.catalog import SpotifyCatalog
from queuevote.spotify.links import LinkResolver
from queuevote.storage.votes import VoteLedger
from queuevote.telegram.bot import create_bot, create_dispatcher, register_commands
from queuevote.voting.workflow import ApprovalWorkflow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

DRAIN_TIMEOUT = 10.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Initializes and cleans up resources:
    - Redis connection (dialogue state, vote ledger)
    - Spotify token store
    - Telegram bot and polling
    """
    settings = get_settings()
    logger.info("Starting application...")

    # Initialize Redis
    redis = Redis.from_url(settings.redis_url)
    try:
        await redis.ping()
        logger.info("Connected to Redis")
    except Exception as e:
        logger.error(f"Failed to connect to Redis: {e}")
        raise

    # Initialize Spotify
    token_store = TokenStore(settings)
    await token_store.ensure_token()
    catalog = SpotifyCatalog(
        token_store,
        market=settings.spotify_market,
        timeout=settings.spotify_timeout,
    )
    resolver = LinkResolver(
        max_redirects=settings.short_link_max_redirects,
        timeout=settings.short_link_timeout,
    )

    # Initialize Telegram bot
    bot = await create_bot(settings)
    storage = RedisStorage(redis=redis)
    dp = create_dispatcher(settings, storage, storage.create_isolation())
    await register_commands(bot, settings)

    workflow = ApprovalWorkflow(
        bot=bot,
        scope=settings.voting_scope,
        resolver=resolver,
        catalog=catalog,
        ledger=VoteLedger(redis, settings.vote_ttl_seconds),
    )

    # Store dependencies in dispatcher's workflow_data for handlers to access
    dp.workflow_data["token_store"] = token_store
    dp.workflow_data["workflow"] = workflow

    app.state.token_store = token_store

    polling_task = asyncio.create_task(
        dp.start_polling(bot, handle_signals=False, close_bot_session=False)
    )
    logger.info("Telegram bot polling started")

    yield

    # Cleanup
    logger.info("Shutting down application...")

    # Stop fetching updates and let in-flight handlers finish
    try:
        await dp.stop_polling()
        await asyncio.wait_for(polling_task, timeout=DRAIN_TIMEOUT)
    except (RuntimeError, asyncio.TimeoutError) as e:
        logger.warning(f"Polling did not stop cleanly: {e!r}")
        polling_task.cancel()
        try:
            await polling_task
        except asyncio.CancelledError:
            pass

    await resolver.close()
    await bot.session.close()
    await storage.close()

    logger.info("Application shutdown complete")


app = FastAPI(
    title="Queue Vote Bot",
    description="Telegram bot that lets a group vote tracks into a Spotify queue",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint."""
    token_store: TokenStore = request.app.state.token_store
    return {"status": "ok", "spotify_authorized": await token_store.has_token()}


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("queuevote.main:app", host=settings.http_host, port=settings.http_port)
