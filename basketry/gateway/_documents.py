"""
GraphQL documents.

Every basket-returning operation selects the full BASKET_FIELDS fragment so
the snapshot can be checked against the money invariants.
"""

ADDRESS_FIELDS = """
fragment AddressFields on Address {
  id
  name
  line1
  line2
  city
  county
  postCode
  country
  countryCode
}
"""

BASKET_FIELDS = """
fragment BasketFields on Basket {
  id
  items {
    id
    course { id name type }
    price
    totalPrice
    isTaster
    payDeposit
    assignToUserId
    chargeFromDate
    discountValue
    promoCodeDiscountValue
    sessionId
    addedAt
  }
  subTotal
  discountTotal
  promoCodeDiscountValue
  creditTotal
  tax
  total
  chargeTotal
  payLater
  discountValue
  creditItems { id description value code validUntil }
  feeItems { id description value optional }
  userId
  sessionId
  createdAt
  updatedAt
  expiresAt
}
"""

PAYMENT_METHOD_FIELDS = (
    """
fragment PaymentMethodFields on PaymentMethod {
  id
  type
  last4
  brand
  expiryMonth
  expiryYear
  isDefault
  billingAddress { ...AddressFields }
  createdAt
}
"""
    + ADDRESS_FIELDS
)

ORDER_FIELDS = (
    """
fragment OrderFields on Order {
  id
  userId
  items {
    id
    itemId
    itemType
    itemName
    price
    totalPrice
    discountValue
    promoCodeDiscountValue
    assignToUserId
    assignToUserName
    chargeFromDate
    extraInfo
    createdAt
  }
  subTotal
  discountTotal
  promoCodeDiscountValue
  creditTotal
  tax
  total
  chargeTotal
  payLater
  status
  paymentMethodId
  paymentMethodType
  paymentIntentId
  paymentTransactionStatus
  billingAddress { ...AddressFields }
  notes
  createdAt
  updatedAt
}
"""
    + ADDRESS_FIELDS
)

# ═══════════════════════════════════════════════════════════════════════════════
# Basket
# ═══════════════════════════════════════════════════════════════════════════════

GET_BASKET = (
    """
query GetBasket {
  getBasket {
    basket { ...BasketFields }
    errors { path message }
  }
}
"""
    + BASKET_FIELDS
)

INIT_BASKET = (
    """
mutation InitBasket {
  initBasket {
    basket { ...BasketFields }
    errors { path message }
  }
}
"""
    + BASKET_FIELDS
)

ADD_ITEM = (
    """
mutation AddItem(
  $itemId: ID!
  $itemType: String!
  $payDeposit: Boolean
  $assignToUserId: String
  $chargeFromDate: Float
) {
  addItem(
    itemId: $itemId
    itemType: $itemType
    payDeposit: $payDeposit
    assignToUserId: $assignToUserId
    chargeFromDate: $chargeFromDate
  ) {
    basket { ...BasketFields }
    errors { path message }
  }
}
"""
    + BASKET_FIELDS
)

REMOVE_ITEM = (
    """
mutation RemoveItem($itemId: ID!, $itemType: String!) {
  removeItem(itemId: $itemId, itemType: $itemType) {
    basket { ...BasketFields }
    errors { path message }
  }
}
"""
    + BASKET_FIELDS
)

USE_CREDIT = (
    """
mutation UseCreditForBasket($useCredit: Boolean!) {
  useCreditForBasket(useCredit: $useCredit) {
    basket { ...BasketFields }
    errors { path message }
  }
}
"""
    + BASKET_FIELDS
)

# Promo mutations return the basket itself, not a {basket, errors} payload.
APPLY_PROMO_CODE = (
    """
mutation ApplyPromoCode($code: String!) {
  applyPromoCode(code: $code) { ...BasketFields }
}
"""
    + BASKET_FIELDS
)

REMOVE_PROMO_CODE = (
    """
mutation RemovePromoCode {
  removePromoCode { ...BasketFields }
}
"""
    + BASKET_FIELDS
)

DESTROY_BASKET = """
mutation DestroyBasket {
  destroyBasket
}
"""

# ═══════════════════════════════════════════════════════════════════════════════
# Payment Methods
# ═══════════════════════════════════════════════════════════════════════════════

GET_PAYMENT_METHODS = (
    """
query GetPaymentMethods {
  getPaymentMethods {
    paymentMethods { ...PaymentMethodFields }
  }
}
"""
    + PAYMENT_METHOD_FIELDS
)

GET_PUBLISHABLE_KEY = """
query GetStripePK {
  getStripe
}
"""

CREATE_PAYMENT_METHOD = (
    """
mutation CreatePaymentMethod(
  $stripePaymentMethodId: String!
  $billingAddress: AddressInput!
  $setAsDefault: Boolean
) {
  createPaymentMethod(
    stripePaymentMethodId: $stripePaymentMethodId
    billingAddress: $billingAddress
    setAsDefault: $setAsDefault
  ) { ...PaymentMethodFields }
}
"""
    + PAYMENT_METHOD_FIELDS
)

DELETE_PAYMENT_METHOD = """
mutation DeletePaymentMethod($paymentMethodId: String!) {
  deletePaymentMethod(paymentMethodId: $paymentMethodId)
}
"""

SET_DEFAULT_PAYMENT_METHOD = """
mutation SetDefaultPaymentMethod($paymentMethodId: String!) {
  setDefaultPaymentMethod(paymentMethodId: $paymentMethodId)
}
"""

# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════

PLACE_ORDER = (
    """
mutation PlaceOrder($data: PlaceOrderInput!) {
  placeOrder(data: $data) {
    order { ...OrderFields }
    nextAction { clientSecret type }
    paymentTransactionStatus
    errors { field message }
  }
}
"""
    + ORDER_FIELDS
)

UPDATE_PAYMENT_INTENT = """
mutation UpdatePaymentIntent($id: String!) {
  updatePaymentIntent(id: $id)
}
"""

GET_ORDER = (
    """
query GetOrder($orderId: String!) {
  getOrder(orderId: $orderId) { ...OrderFields }
}
"""
    + ORDER_FIELDS
)

GET_ORDER_HISTORY = (
    """
query GetOrderHistory($limit: Int, $offset: Int) {
  getOrderHistory(limit: $limit, offset: $offset) {
    orders { ...OrderFields }
    totalCount
  }
}
"""
    + ORDER_FIELDS
)

CANCEL_ORDER = """
mutation CancelOrder($orderId: String!) {
  cancelOrder(orderId: $orderId)
}
"""

PROCESS_REFUND = """
mutation ProcessRefund($orderId: String!, $amount: Int!, $reason: String) {
  processRefund(orderId: $orderId, amount: $amount, reason: $reason)
}
"""
