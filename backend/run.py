"""
启动脚本
等价于 uvicorn logdeck.main:app，读取 settings 中的监听地址与端口
"""

import uvicorn

from logdeck.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "logdeck.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
