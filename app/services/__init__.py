"""Services package"""
from app.services.taroize import TaroizeConverter, convert_page, convert_wxml

__all__ = [
    "TaroizeConverter",
    "convert_page",
    "convert_wxml"
]
