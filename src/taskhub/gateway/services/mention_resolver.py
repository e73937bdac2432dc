"""MentionResolver -- 评论 @提及解析"""

import re

from taskhub.core.store.protocols import UserDirectory

# @ 后跟一个或多个单词字符
_MENTION_RE = re.compile(r"@(\w+)")


def extract_usernames(text: str) -> list[str]:
    """提取候选用户名：去重，保持首次出现顺序"""
    return list(dict.fromkeys(_MENTION_RE.findall(text or "")))


class MentionResolver:
    """把评论中的 @username 解析为用户 ID

    只做精确用户名匹配；找不到的用户名静默丢弃；结果不含评论作者本人。
    """

    def __init__(self, directory: UserDirectory) -> None:
        self._directory = directory

    async def resolve(self, text: str, author_id: str | None = None) -> list[str]:
        resolved: list[str] = []
        for username in extract_usernames(text):
            user_id = await self._directory.resolve_username(username)
            if user_id is None or user_id == author_id or user_id in resolved:
                continue
            resolved.append(user_id)
        return resolved
