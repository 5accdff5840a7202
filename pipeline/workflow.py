"""
檔案匯入匯出流程
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from core.exceptions import BundleFormatError, StorageError
from core.library import ImportResult, LyricsLibrary
from core.lrc import LrcParser, LrcWriter

logger = logging.getLogger(__name__)


class LyricsWorkflow:
    """LRC 檔案與整包備份的匯入匯出"""

    def __init__(self, library: LyricsLibrary):
        self.library = library
        self.parser = LrcParser()
        self.writer = LrcWriter()

    def import_lrc_file(self, file_path: str) -> str:
        """匯入 LRC 檔案為新歌曲，回傳儲存鍵"""
        timeline = self.parser.parse_file(file_path)
        metadata = timeline.metadata
        timeline.timeline_id = self.library.generate_id(metadata.title, metadata.artist)
        timeline.correct_all()
        return self.library.save(timeline)

    def export_lrc_file(self, key: str, file_path: str):
        """匯出歌曲為 LRC 檔案"""
        timeline = self.library.load(key)
        if timeline is None:
            raise StorageError(f'Song not found: {key}')
        self.writer.write_file(timeline, file_path)

    def export_bundle_file(self, file_path: str, companions: Optional[Dict[str, Any]] = None) -> int:
        """匯出整個資料庫為 JSON，回傳歌曲數"""
        bundle = self.library.export_bundle(companions)
        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(bundle, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Failed to write bundle: {e}")
            raise StorageError(f'Cannot write {file_path}: {e}') from e
        logger.info(f"Bundle saved: {file_path}")
        return bundle['totalSongs']

    def import_bundle_file(self, file_path: str, overwrite: bool = False, mark_built_in: bool = False) -> ImportResult:
        """從 JSON 匯入整包歌曲"""
        try:
            content = Path(file_path).read_text(encoding='utf-8')
        except OSError as e:
            logger.error(f"Failed to read bundle: {e}")
            raise StorageError(f'Cannot read {file_path}: {e}') from e
        try:
            bundle = json.loads(content)
        except ValueError as e:
            raise BundleFormatError(f'Bundle is not valid JSON: {e}') from e
        return self.library.import_bundle(bundle, overwrite=overwrite, mark_built_in=mark_built_in)
