"""
本地启动入口（开发用）。

推荐启动方式：
1) `uvicorn tobject2json.api.server:app --host 0.0.0.0 --port 8000 --reload`
2) 或直接执行：`python main.py`
"""

import uvicorn

from tobject2json.core.config import settings


def main() -> None:
    uvicorn.run("tobject2json.api.server:app", host=settings.api.host, port=settings.api.port, reload=True)


if __name__ == "__main__":
    main()
