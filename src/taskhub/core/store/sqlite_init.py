"""SQLite 数据库初始化

PRAGMA 配置 + 九张表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# users 表 DDL（用户目录，身份认证由外部系统负责）
_USERS_DDL = """
CREATE TABLE IF NOT EXISTS users (
    user_id       TEXT PRIMARY KEY,
    username      TEXT NOT NULL,
    display_name  TEXT NOT NULL DEFAULT '',
    created_at    TEXT NOT NULL
);
"""

_USERS_INDEXES = [
    # 用户名精确匹配（SQLite TEXT 默认区分大小写）
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_users_username ON users(username);",
]

# tasks 表 DDL
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    task_id         TEXT PRIMARY KEY,
    title           TEXT NOT NULL DEFAULT '',
    description     TEXT NOT NULL DEFAULT '',
    difficulty      TEXT NOT NULL DEFAULT 'EASY',
    deadline        TEXT,
    status          TEXT NOT NULL DEFAULT 'PENDING',
    created_by      TEXT NOT NULL,
    assigned_to     TEXT,
    parent_task_id  TEXT,
    created_at      TEXT NOT NULL,
    updated_at      TEXT NOT NULL,
    version         INTEGER NOT NULL DEFAULT 1,

    FOREIGN KEY (created_by) REFERENCES users(user_id),
    FOREIGN KEY (assigned_to) REFERENCES users(user_id),
    FOREIGN KEY (parent_task_id) REFERENCES tasks(task_id)
);
"""

_TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_assigned_to ON tasks(assigned_to);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_deadline ON tasks(deadline);",
]

# task_transactions 表 DDL（append-only 审计流水）
_TRANSACTIONS_DDL = """
CREATE TABLE IF NOT EXISTS task_transactions (
    transaction_id  TEXT PRIMARY KEY,
    task_id         TEXT NOT NULL,
    from_user_id    TEXT NOT NULL,
    to_user_id      TEXT NOT NULL,
    comment         TEXT NOT NULL DEFAULT '',
    ts              TEXT NOT NULL,

    FOREIGN KEY (task_id) REFERENCES tasks(task_id)
);
"""

_TRANSACTIONS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_task_transactions_task ON task_transactions(task_id, ts);",
]

# task_comments / task_comment_mentions 表 DDL
_COMMENTS_DDL = """
CREATE TABLE IF NOT EXISTS task_comments (
    comment_id  TEXT PRIMARY KEY,
    task_id     TEXT NOT NULL,
    author_id   TEXT NOT NULL,
    content     TEXT NOT NULL,
    created_at  TEXT NOT NULL,

    FOREIGN KEY (task_id) REFERENCES tasks(task_id)
);
"""

_MENTIONS_DDL = """
CREATE TABLE IF NOT EXISTS task_comment_mentions (
    comment_id         TEXT NOT NULL,
    mentioned_user_id  TEXT NOT NULL,
    position           INTEGER NOT NULL,

    PRIMARY KEY (comment_id, mentioned_user_id),
    FOREIGN KEY (comment_id) REFERENCES task_comments(comment_id)
);
"""

_COMMENTS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_task_comments_task ON task_comments(task_id, created_at);",
]

# notifications 表 DDL（不引用 tasks，避免级联）
_NOTIFICATIONS_DDL = """
CREATE TABLE IF NOT EXISTS notifications (
    notification_id  TEXT PRIMARY KEY,
    user_id          TEXT NOT NULL,
    message          TEXT NOT NULL,
    task_id          TEXT,
    is_read          INTEGER NOT NULL DEFAULT 0,
    created_at       TEXT NOT NULL
);
"""

_NOTIFICATIONS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_notifications_user ON notifications(user_id, created_at DESC);",
]

# performance_points 表 DDL
_PERFORMANCE_DDL = """
CREATE TABLE IF NOT EXISTS performance_points (
    point_id    TEXT PRIMARY KEY,
    user_id     TEXT NOT NULL,
    task_id     TEXT NOT NULL,
    points      INTEGER NOT NULL,
    reason      TEXT NOT NULL DEFAULT '',
    created_at  TEXT NOT NULL
);
"""

_PERFORMANCE_INDEXES = [
    # 每个任务最多一条积分记录（防止重复完成）
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_performance_points_task ON performance_points(task_id);",
    "CREATE INDEX IF NOT EXISTS idx_performance_points_user ON performance_points(user_id);",
]


# work_groups / work_group_members 表 DDL
_WORK_GROUPS_DDL = """
CREATE TABLE IF NOT EXISTS work_groups (
    group_id    TEXT PRIMARY KEY,
    name        TEXT NOT NULL,
    leader_id   TEXT NOT NULL,
    created_at  TEXT NOT NULL,

    FOREIGN KEY (leader_id) REFERENCES users(user_id)
);
"""

_WORK_GROUP_MEMBERS_DDL = """
CREATE TABLE IF NOT EXISTS work_group_members (
    group_id   TEXT NOT NULL,
    user_id    TEXT NOT NULL,
    joined_at  TEXT NOT NULL,

    PRIMARY KEY (group_id, user_id),
    FOREIGN KEY (group_id) REFERENCES work_groups(group_id),
    FOREIGN KEY (user_id) REFERENCES users(user_id)
);
"""

_WORK_GROUPS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_work_groups_leader ON work_groups(leader_id);",
]

async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    # 创建表
    for ddl in (
        _USERS_DDL,
        _TASKS_DDL,
        _TRANSACTIONS_DDL,
        _COMMENTS_DDL,
        _MENTIONS_DDL,
        _NOTIFICATIONS_DDL,
        _PERFORMANCE_DDL,
        _WORK_GROUPS_DDL,
        _WORK_GROUP_MEMBERS_DDL,
    ):
        await conn.execute(ddl)

    # 创建索引
    for idx_sql in (
        _USERS_INDEXES
        + _TASKS_INDEXES
        + _TRANSACTIONS_INDEXES
        + _COMMENTS_INDEXES
        + _NOTIFICATIONS_INDEXES
        + _PERFORMANCE_INDEXES
        + _WORK_GROUPS_INDEXES
    ):
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
