"""
Database client and repositories
"""
from siteprobe.db.prisma_client import connect_prisma, disconnect_prisma, get_prisma

__all__ = [
    'connect_prisma',
    'disconnect_prisma',
    'get_prisma',
]
