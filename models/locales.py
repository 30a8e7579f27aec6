"""User-facing strings for the dressing room in every supported language."""

from __future__ import annotations

from typing import Any, Dict

EN: Dict[str, Any] = {
    "start": {
        "error": {
            "fileType": "Please select an image file.",
            "createModel": "Failed to create model",
        },
        "compare": {
            "generating": "Generating Model...",
        },
    },
    "wardrobe": {
        "error": {
            "load": "Failed to load wardrobe item. Check the logs for details.",
            "alreadyWorn": "This item is already part of the outfit.",
            "unknown": "Unknown wardrobe item.",
        },
    },
    "outfitStack": {
        "baseModel": "Base Model",
    },
    "app": {
        "error": {
            "applyGarment": "Failed to apply garment",
            "changePose": "Failed to change pose",
            "changeColor": "Failed to change color",
            "changeBackground": "Failed to change background",
            "changeLighting": "Failed to change lighting",
            "crop": "Failed to crop image",
            "fileFormat": "File format not supported. Please upload an image format like PNG, JPEG, or WEBP.",
            "unknown": "An unknown error occurred.",
            "lookbook": {
                "addGarment": "Add at least one garment to create a lookbook.",
                "generate": "Failed to generate lookbook",
            },
        },
        "loading": {
            "adding": "Adding",
            "posing": "Changing pose...",
            "coloring": "Changing color to",
            "background": "Changing background...",
            "lighting": "Adjusting lighting...",
            "lookbook": "Generating your lookbook...",
        },
    },
    "poses": {
        "Full frontal view, hands on hips": "Hands on Hips",
        "Slightly turned, 3/4 view": "3/4 View",
        "Side profile view": "Side Profile",
        "Jumping in the air, mid-action shot": "Jumping",
        "Walking towards camera": "Walking",
        "Leaning against a wall": "Leaning",
    },
    "backgrounds": {
        "Default": "Default",
        "Studio Background": "Studio",
        "A Parisian street cafe": "Paris Cafe",
        "A futuristic neon-lit alley": "Neon Alley",
        "A serene beach at sunset": "Sunset Beach",
        "An elegant library with wooden shelves": "Library",
        "A lush botanical garden": "Garden",
    },
    "lighting": {
        "Default": "Default",
        "Bright studio lighting": "Studio",
        "Warm, golden hour lighting": "Golden Hour",
        "Dramatic, cinematic lighting": "Cinematic",
        "Soft, diffused lighting": "Soft",
    },
    "magicWand": {
        "label": "Edit Garment",
        "error": "Failed to apply edit",
    },
}

ZH: Dict[str, Any] = {
    "start": {
        "error": {
            "fileType": "请选择一个图片文件。",
            "createModel": "创建模特失败",
        },
        "compare": {
            "generating": "正在生成模特...",
        },
    },
    "wardrobe": {
        "error": {
            "load": "加载衣柜物品失败。请查看日志了解详情。",
            "alreadyWorn": "该物品已在当前搭配中。",
            "unknown": "未知的衣柜物品。",
        },
    },
    "outfitStack": {
        "baseModel": "基础模特",
    },
    "app": {
        "error": {
            "applyGarment": "应用服装失败",
            "changePose": "更改姿势失败",
            "changeColor": "更改颜色失败",
            "changeBackground": "更改背景失败",
            "changeLighting": "更改灯光失败",
            "crop": "裁剪图片失败",
            "fileFormat": "不支持的文件格式。请上传 PNG、JPEG 或 WEBP 等图片格式。",
            "unknown": "发生未知错误。",
            "lookbook": {
                "addGarment": "至少添加一件服装才能创建造型集。",
                "generate": "生成造型集失败",
            },
        },
        "loading": {
            "adding": "正在添加",
            "posing": "正在更改姿势...",
            "coloring": "正在将颜色更改为",
            "background": "正在更改背景...",
            "lighting": "正在调整灯光...",
            "lookbook": "正在生成您的造型集...",
        },
    },
    "poses": {
        "Full frontal view, hands on hips": "叉腰姿势",
        "Slightly turned, 3/4 view": "3/4侧面",
        "Side profile view": "侧面视角",
        "Jumping in the air, mid-action shot": "跳跃",
        "Walking towards camera": "走向镜头",
        "Leaning against a wall": "倚墙",
    },
    "backgrounds": {
        "Default": "默认",
        "Studio Background": "影棚",
        "A Parisian street cafe": "巴黎咖啡馆",
        "A futuristic neon-lit alley": "霓虹小巷",
        "A serene beach at sunset": "日落海滩",
        "An elegant library with wooden shelves": "图书馆",
        "A lush botanical garden": "植物园",
    },
    "lighting": {
        "Default": "默认",
        "Bright studio lighting": "影棚灯",
        "Warm, golden hour lighting": "黄金时刻",
        "Dramatic, cinematic lighting": "电影灯效",
        "Soft, diffused lighting": "柔光",
    },
    "magicWand": {
        "label": "编辑服装",
        "error": "应用编辑失败",
    },
}

LOCALES: Dict[str, Dict[str, Any]] = {"EN": EN, "中文": ZH}


def translate(key: str, language: str = "EN", fallback: str | None = None) -> str:
    """Look up a dotted key, returning ``fallback`` (or the key) when missing."""

    value: Any = LOCALES.get(language, EN)
    for part in key.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return fallback if fallback is not None else key
    if isinstance(value, str):
        return value
    return fallback if fallback is not None else key


__all__ = ["EN", "ZH", "LOCALES", "translate"]
