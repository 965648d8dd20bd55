#!/usr/bin/env python3
"""
cloudlyrics 云音乐歌词同步 - 将滚动歌词同步到 Home Assistant 媒体播放器

主程序入口点，负责配置加载、日志设置、服务组装和优雅的启动/关闭处理。
"""
import asyncio
import logging
from typing import List, Optional

import aiohttp

from cloudlyrics.core.errors import ConfigurationError
from cloudlyrics.core.interfaces import IDisplayRenderer
from cloudlyrics.lyrics.lyrics_client import CloudMusicLyricsClient
from cloudlyrics.lyrics.lyrics_synchronizer import LyricsSynchronizer
from cloudlyrics.playback.display_service import LyricsDisplayService
from cloudlyrics.playback.playback_reader import HomeAssistantPlaybackReader
from cloudlyrics.storage.offset_store import JsonOffsetStore
from cloudlyrics.ui.lyrics_embed import LyricsEmbedBuilder
from cloudlyrics.ui.renderers import DiscordWebhookRenderer, LoggingRenderer
from cloudlyrics.utils.config_manager import ConfigManager
from cloudlyrics.utils.logger import setup_logger


async def run_service(config: ConfigManager) -> None:
    """
    组装并运行歌词显示服务，直到被取消。

    Args:
        config: 配置管理器

    Raises:
        ConfigurationError: 必要配置缺失
    """
    logger = logging.getLogger("cloudlyrics")

    card_config = config.get_card_config()
    ha_url = config.get_home_assistant_url()
    token = config.get_home_assistant_token()
    timeout = config.get_request_timeout()

    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
        fetcher = CloudMusicLyricsClient(
            config.get_lyrics_api_base_url(), token=token, timeout=timeout, session=session
        )
        reader = HomeAssistantPlaybackReader(ha_url, token=token, timeout=timeout, session=session)
        offset_store = JsonOffsetStore(config.get_offset_file(), card_config.entity)

        renderers: List[IDisplayRenderer] = [LoggingRenderer()]
        webhook_renderer: Optional[DiscordWebhookRenderer] = None
        webhook_url = config.get_discord_webhook_url()
        if webhook_url:
            embed_builder = LyricsEmbedBuilder(
                card_config, window_lines=config.get_display_window_lines(), base_url=ha_url
            )
            webhook_renderer = DiscordWebhookRenderer(
                webhook_url, session, embed_builder,
                min_interval=config.get_display_min_update_interval()
            )
            renderers.append(webhook_renderer)
            logger.info("✅ Discord 歌词显示已启用")

        synchronizer = LyricsSynchronizer(card_config, fetcher, offset_store)
        service = LyricsDisplayService(
            synchronizer,
            reader,
            renderers,
            tick_interval=config.get_tick_interval(),
            poll_interval=config.get_poll_interval()
        )

        service.start()
        try:
            await asyncio.Event().wait()
        finally:
            await service.stop()
            if webhook_renderer is not None:
                await webhook_renderer.close()


def main() -> int:
    """
    cloudlyrics 主入口函数。

    Returns:
        int: 退出代码（0表示成功，1表示错误）
    """
    try:
        config = ConfigManager()
    except FileNotFoundError as e:
        logging.basicConfig(level=logging.INFO)
        logging.getLogger("cloudlyrics").error(f"❌ 配置文件错误: {e}")
        return 1

    setup_logger(
        log_level=config.get_log_level(),
        log_file=config.get_log_file(),
        max_size=config.get_log_max_size(),
        backup_count=config.get_log_backup_count()
    )
    logger = logging.getLogger("cloudlyrics")

    logger.info("=" * 60)
    logger.info("🎵 cloudlyrics 歌词同步启动中...")
    logger.info("=" * 60)

    try:
        asyncio.run(run_service(config))
    except KeyboardInterrupt:
        logger.info("🛑 用户停止了歌词同步 (Ctrl+C)")
        return 0
    except ConfigurationError as e:
        logger.error(f"❌ 配置错误: {e}")
        logger.error("请检查 config/config.yaml 文件")
        return 1
    except Exception as e:
        logger.error(f"❌ 运行时发生意外错误: {e}", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    exit(main())
