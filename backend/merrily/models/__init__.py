from .catalog import SoftDeleteMixin, Category, Product, ProductCollection, CollectionProduct
from .sales import Sale, SaleItem, DailySalesSummary, ProductSalesSummary, SalesTarget
from .finance import ExpenseCategory, Expense, Budget
from .staff import UserProfile, Attendance, ActivityLog
from .social import Post, Comment, PostLike
from .notifications import Notification, PushSubscription
from .site import UiPreset, SiteConfig

__all__ = [
    'SoftDeleteMixin',
    'Category', 'Product', 'ProductCollection', 'CollectionProduct',
    'Sale', 'SaleItem', 'DailySalesSummary', 'ProductSalesSummary', 'SalesTarget',
    'ExpenseCategory', 'Expense', 'Budget',
    'UserProfile', 'Attendance', 'ActivityLog',
    'Post', 'Comment', 'PostLike',
    'Notification', 'PushSubscription',
    'UiPreset', 'SiteConfig',
]
