from typing import Any

from fastapi.responses import JSONResponse


class BizResponse(JSONResponse):
    """
    统一响应体：
        {"code": "OK", "msg": "ok", "data": ...}
    - 出错时 data 为 None，code 为异常的稳定错误码
    """

    def __init__(self, data: Any = None, msg: str = "ok", status_code: int = 200, code: str = "OK"):
        super().__init__(
            status_code=status_code,
            content={"code": code, "msg": msg, "data": data},
        )
