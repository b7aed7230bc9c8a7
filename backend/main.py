import uvicorn
import sys
import os

# 确保打包后能正确找到模块
if getattr(sys, 'frozen', False):
    # 运行在 PyInstaller 打包后的环境，数据库和日志放在可执行文件旁边
    os.chdir(os.path.dirname(sys.executable))

if __name__ == "__main__":
    # 打包后的生产模式不使用 reload
    is_dev = not getattr(sys, 'frozen', False)

    uvicorn.run(
        "quotedesk.main:app",
        host=os.getenv("HOST", "127.0.0.1"),  # 默认只监听本地
        port=int(os.getenv("PORT", "8000")),
        reload=is_dev,
        log_level="info"
    )
