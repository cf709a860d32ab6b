# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .session import Base, Database, SchemaBootstrapError

__all__ = ["Base", "Database", "SchemaBootstrapError"]
