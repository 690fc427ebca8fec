# deckhub/storage/asset/LocalAssetStorage.py

import shutil
import uuid
from pathlib import Path
from typing import List

from deckhub.storage.asset.asset_interface import IAssetStorage
from deckhub.core.exceptions import ValidationError, AssetStorageError
from deckhub.core.logx import logger

STAGING_DIR = "tmp"
DECK_IMAGE_DIR = "deck_images"
ALLOWED_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp"}
MAX_IMAGES = 3


class LocalAssetStorage(IAssetStorage):
    """
    本地文件系统实现：
        <asset_root>/tmp/<name>                         暂存区（客户端上传）
        <asset_root>/deck_images/<owner_id>/<uuid>.<ext> 正式目录
    对外地址为 <base_url>/<相对路径>
    """

    def __init__(self, root: str | Path, base_url: str = "/assets"):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    # ---------- 地址 <-> 路径 ----------

    def url_for(self, relative_path: str) -> str:
        return f"{self.base_url}/{relative_path}"

    def _relative_path(self, url: str) -> str:
        prefix = f"{self.base_url}/"
        if not url.startswith(prefix):
            raise ValidationError(f"asset url {url} is not managed by this storage")
        relative = url[len(prefix):]
        if not relative or ".." in Path(relative).parts:
            raise ValidationError(f"invalid asset url {url}")
        return relative

    def _staged_path(self, url: str) -> Path:
        relative = self._relative_path(url)
        if not relative.startswith(f"{STAGING_DIR}/"):
            raise ValidationError(f"asset url {url} is not in the staging area")
        path = self.root / relative
        if path.suffix.lower() not in ALLOWED_SUFFIXES:
            raise ValidationError(f"unsupported file type: {path.suffix or '(none)'}")
        return path

    # ---------- 移动 / 删除 ----------

    def move_staged(self, urls: List[str], owner_id: str) -> List[str]:
        if len(urls) > MAX_IMAGES:
            raise ValidationError(f"at most {MAX_IMAGES} images can be attached")

        moved: List[str] = []
        try:
            for url in urls:
                src = self._staged_path(url)
                if not src.is_file():
                    raise ValidationError(f"staged asset {url} not found")

                relative = f"{DECK_IMAGE_DIR}/{owner_id}/{uuid.uuid4().hex}{src.suffix.lower()}"
                dest = self.root / relative
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.move(str(src), str(dest))
                moved.append(self.url_for(relative))
        except Exception as e:
            # 出错时删除已经移动的文件，整体回滚
            for url in moved:
                try:
                    self.delete(url)
                except Exception:
                    logger.exception(f"rollback of moved asset {url} failed")
            if isinstance(e, ValidationError):
                raise
            raise AssetStorageError() from e

        return moved

    def delete(self, url: str) -> None:
        path = self.root / self._relative_path(url)
        path.unlink(missing_ok=True)
