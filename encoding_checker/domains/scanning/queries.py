from dataclasses import dataclass

from encoding_checker.core.cqrs.query import Query


# Snapshot of the controller (state, counts, last outcome)
@dataclass(frozen=True)
class GetScanStatusQuery(Query):
    pass


# FileResults of the active scan, or of the last one
@dataclass(frozen=True)
class GetScanResultsQuery(Query):
    pass


# Charset identifiers the detector backend can report
@dataclass(frozen=True)
class GetKnownCharsetsQuery(Query):
    pass
