"""Taroize Service - converts WeChat mini-program pages to Taro components"""

__version__ = "1.0.0"
