"""
HTTP接口包
"""
