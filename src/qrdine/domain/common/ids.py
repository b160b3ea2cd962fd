from __future__ import annotations

from typing import NewType

RestaurantId = NewType("RestaurantId", str)
MenuItemId = NewType("MenuItemId", str)
TableId = NewType("TableId", str)
TableUsername = NewType("TableUsername", str)
SessionToken = NewType("SessionToken", str)
TableSessionId = NewType("TableSessionId", str)
OrderId = NewType("OrderId", str)
OrderLineId = NewType("OrderLineId", str)
StaffCallId = NewType("StaffCallId", str)
ReviewId = NewType("ReviewId", str)
