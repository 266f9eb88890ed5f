"""Follower collection pipeline."""

from __future__ import annotations

import logging

from tqdm import tqdm

from .batching import chunk
from .config import DEFAULT_MAX_FOLLOWERS, FollowerConfig
from .io_files import write_json
from .models import FollowerProfile, FollowerSource
from .twitter import MAX_LOOKUP_IDS, TwitterClient, make_retry_session


def collect_follower_ids(
    source: FollowerSource,
    handle: str,
    *,
    logger: logging.Logger,
    max_count: int = DEFAULT_MAX_FOLLOWERS,
) -> list[str]:
    """Page through follower ids until the cursor runs out or ``max_count`` is reached."""
    ids: list[str] = []
    cursor: str | None = None
    while True:
        page = source.fetch_follower_ids(handle, cursor)
        ids.extend(page.ids)
        logger.info("Collected %d followers", len(page.ids))
        cursor = page.next_cursor
        if not cursor or len(ids) >= max_count:
            break
    return ids


def collect_profiles(
    source: FollowerSource,
    ids: list[str],
    *,
    logger: logging.Logger,
    show_progress: bool = False,
) -> list[FollowerProfile]:
    """Look up profiles in chunks of 100 ids, preserving id order."""
    profiles: list[FollowerProfile] = []
    groups = chunk(ids, MAX_LOOKUP_IDS)
    iterator = tqdm(groups, desc="looking up users") if show_progress else groups
    for group in iterator:
        for user in source.lookup_users(group):
            profiles.append(FollowerProfile.from_api(user))
        logger.info("Total collected users: %d", len(profiles))
    return profiles


def run_followers(config: FollowerConfig, *, logger: logging.Logger) -> tuple[str, str]:
    """Collect follower ids and profiles and write both JSON documents."""
    session = make_retry_session(config.user_agent, config.bearer_token)
    source = TwitterClient(session=session, timeout=config.request_timeout, logger=logger)

    ids = collect_follower_ids(
        source, config.handle, logger=logger, max_count=config.max_followers
    )
    logger.info("Collected %d follower ids. Now collecting details.", len(ids))
    write_json(config.ids_output, ids)

    profiles = collect_profiles(
        source, ids, logger=logger, show_progress=config.show_progress
    )
    logger.info("Collected %d followers", len(profiles))
    write_json(config.details_output, [profile.to_dict() for profile in profiles])
    return config.ids_output, config.details_output
