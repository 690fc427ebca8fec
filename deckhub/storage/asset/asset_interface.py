# deckhub/storage/asset/asset_interface.py

from typing import List, Protocol


class IAssetStorage(Protocol):
    """
    卡组图片 / 缩略图存储：
    - move_staged: 把暂存区文件移动到正式目录，返回正式地址（失败时自行回滚已移动的文件）
    - delete: 幂等删除，文件已不存在不报错
    """

    def move_staged(self, urls: List[str], owner_id: str) -> List[str]:
        ...

    def delete(self, url: str) -> None:
        ...
