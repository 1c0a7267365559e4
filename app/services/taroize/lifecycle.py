"""
Fixed name tables used by the converter.
"""
from typing import Dict


# Mini-program lifecycle hook -> Taro class component method
PAGE_LIFECYCLE: Dict[str, str] = {
    "onLoad": "componentWillMount",
    "onShow": "componentDidShow",
    "onReady": "componentDidMount",
    "onHide": "componentDidHide",
    "onUnload": "componentWillUnmount",
    "onLaunch": "componentWillMount",
    "onError": "componentDidCatchError",
    "onPageNotFound": "componentDidNotFound",
    "attached": "componentDidMount",
    "detached": "componentWillUnmount",
}

# Components exported by @tarojs/components
KNOWN_COMPONENTS = frozenset([
    "Block",
    # view containers
    "View", "ScrollView", "Swiper", "SwiperItem", "MovableArea", "MovableView",
    "CoverView", "CoverImage", "MatchMedia", "PageContainer", "RootPortal",
    "ShareElement",
    # basic content
    "Icon", "Text", "RichText", "Progress",
    # forms
    "Button", "Checkbox", "CheckboxGroup", "Editor", "Form", "Input",
    "KeyboardAccessory", "Label", "Picker", "PickerView", "PickerViewColumn",
    "Radio", "RadioGroup", "Slider", "Switch", "Textarea",
    # navigation
    "Navigator", "FunctionalPageNavigator",
    # media
    "Audio", "Image", "Video", "Camera", "LivePlayer", "LivePusher",
    # map, canvas and open capabilities
    "Map", "Canvas", "OpenData", "WebView", "Ad", "OfficialAccount",
])
