type Address = str
type BlockNumber = int
type ChainId = int
type Timestamp = int
type UsdPrice = float
