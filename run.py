#!/usr/bin/env python3
import uvicorn
import logging
import os
from datetime import datetime
from nepriziv.core.config import settings

# 创建logs目录（如果不存在）
log_dir = "logs"
os.makedirs(log_dir, exist_ok=True)

# 配置根logger：控制台 + 按启动时间命名的日志文件
logger = logging.getLogger()
logger.setLevel(logging.INFO)

console_handler = logging.StreamHandler()
console_handler.setLevel(logging.INFO)

log_filename = os.path.join(log_dir, f"nepriziv_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log")
file_handler = logging.FileHandler(log_filename, encoding='utf-8')
file_handler.setLevel(logging.INFO)

formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
console_handler.setFormatter(formatter)
file_handler.setFormatter(formatter)

# 清除可能已存在的处理器，然后添加新的处理器
logger.handlers = []
logger.addHandler(console_handler)
logger.addHandler(file_handler)


if __name__ == "__main__":
    logger.info(f"启动API服务 - 监听 {settings.HOST}:{settings.PORT}")
    logger.info(f"日志文件路径: {log_filename}")
    uvicorn.run("nepriziv.main:app", host=settings.HOST, port=settings.PORT, reload=settings.RELOAD)
