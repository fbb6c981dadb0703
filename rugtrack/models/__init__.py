# Models package
from rugtrack.models.order import Order, CarpetItem, ApprovalStatus, ItemStatus, Material, Condition
