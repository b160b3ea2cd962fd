from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class MoneyResponse(BaseModel):
    amountCents: int
    currency: str


class MenuItemResponse(BaseModel):
    itemId: str
    name: str
    description: str | None = None
    priceMoney: MoneyResponse
    isAvailable: bool
    category: str | None = None


class MenuResponse(BaseModel):
    restaurantId: str
    categories: list[str] = Field(default_factory=list)
    items: list[MenuItemResponse] = Field(default_factory=list)


class TableResponse(BaseModel):
    tableId: str
    restaurantId: str
    username: str
    name: str
    isActive: bool
    activeSessionId: str | None = None
    createdAt: datetime


class TableListResponse(BaseModel):
    tables: list[TableResponse] = Field(default_factory=list)


class TableSessionResponse(BaseModel):
    sessionId: str
    restaurantId: str
    table: str
    tableName: str
    startTime: datetime
    endTime: datetime | None = None
    durationMinutes: int | None = None


class ClaimTableResponse(BaseModel):
    status: str
    message: str
    table: str
    sessionId: str


class TableAccessResponse(BaseModel):
    message: str
    table: TableResponse
    closedSession: TableSessionResponse | None = None


class OrderLineResponse(BaseModel):
    lineId: str
    itemId: str
    name: str
    quantity: int
    unitPrice: MoneyResponse
    lineTotal: MoneyResponse
    adminApproved: bool


class OrderResponse(BaseModel):
    orderId: str
    restaurantId: str
    table: str
    tableName: str
    sessionId: str
    customerId: str | None = None
    state: str
    phase: str
    lines: list[OrderLineResponse] = Field(default_factory=list)
    total: MoneyResponse
    createdAt: datetime
    updatedAt: datetime


class StaffCallResponse(BaseModel):
    callId: str
    restaurantId: str
    table: str
    tableName: str
    sessionId: str | None = None
    customerId: str | None = None
    reason: str
    status: str
    createdAt: datetime
    updatedAt: datetime


class CallStaffResponse(BaseModel):
    message: str
    call: StaffCallResponse


class ReviewResponse(BaseModel):
    reviewId: str
    restaurantId: str
    rating: int
    comment: str | None = None
    sessionId: str | None = None
    createdAt: datetime


class RatingBucketResponse(BaseModel):
    star: int
    count: int


class ReviewStatsResponse(BaseModel):
    totalReviews: int
    averageRating: float
    ratingDistribution: list[RatingBucketResponse] = Field(default_factory=list)


class ReviewListResponse(BaseModel):
    reviews: list[ReviewResponse] = Field(default_factory=list)
    stats: ReviewStatsResponse


class OrderCardResponse(BaseModel):
    order: OrderResponse | None = None
    index: int
    time: datetime
    staffCalls: list[StaffCallResponse] = Field(default_factory=list)
    reviews: list[ReviewResponse] = Field(default_factory=list)


class SessionHistoryItemResponse(BaseModel):
    sessionId: str
    restaurantId: str
    table: str
    tableName: str
    startTime: datetime
    endTime: datetime | None = None
    durationMinutes: int | None = None
    isOpen: bool
    orders: list[OrderResponse] = Field(default_factory=list)
    staffCalls: list[StaffCallResponse] = Field(default_factory=list)
    reviews: list[ReviewResponse] = Field(default_factory=list)
    cards: list[OrderCardResponse] = Field(default_factory=list)


class SessionHistoryResponse(BaseModel):
    sessions: list[SessionHistoryItemResponse] = Field(default_factory=list)


class AdminOverviewResponse(BaseModel):
    orderRequests: list[OrderResponse] = Field(default_factory=list)
    activeOrders: list[OrderResponse] = Field(default_factory=list)
    activeStaffCalls: list[StaffCallResponse] = Field(default_factory=list)
    pollIntervalSeconds: int
