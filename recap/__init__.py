"""
Recap - 对话录音、转录与AI洞察服务
"""

__version__ = "1.0.0"
