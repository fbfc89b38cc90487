"""
Swap report: tabular status history and a printed run summary from SwapResult.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

import pandas as pd

from swapflow_core.events import Event
from swapflow_core.execution.engine import SwapResult
from swapflow_core.networks import explorer_tx_url


def status_history_frame(result: SwapResult) -> pd.DataFrame:
    """
    One row per status observation of the monitored order.

    Returns
    -------
    pd.DataFrame
        DatetimeIndex (UTC, name 'timestamp') and columns poll (1-based) and
        status. Empty if the run never reached monitoring.
    """
    history = result.monitor.history if result.monitor is not None else []
    df = pd.DataFrame(
        {
            "poll": list(range(1, len(history) + 1)),
            "status": [status.value for _, status in history],
        },
        index=pd.DatetimeIndex([ts for ts, _ in history], name="timestamp"),
    )
    return df


def event_frame(events: Sequence[Event]) -> pd.DataFrame:
    """Lifecycle events as rows: timestamp index, kind, and payload columns."""
    rows = [{"timestamp": e.timestamp, "kind": e.kind.value, **e.payload} for e in events]
    if not rows:
        return pd.DataFrame(columns=["kind"], index=pd.DatetimeIndex([], name="timestamp"))
    return pd.DataFrame(rows).set_index("timestamp")


def print_report(result: SwapResult, chain_id: int) -> pd.DataFrame:
    """
    Print a summary of one swap run: quote, allowance decision, order id,
    final status with executed amounts and a settlement link.

    Parameters
    ----------
    result : SwapResult
        Output of SwapPipeline.run().
    chain_id : int
        Network the run used (for the explorer link).

    Returns
    -------
    pd.DataFrame
        The status history (e.g. for programmatic use).
    """
    history = status_history_frame(result)
    print("--- Swap Report ---")
    req = result.request
    print(f"Sell:             {req.sell_amount} of {req.sell_token}")
    print(f"Buy:              {req.buy_token}")
    if result.quote is not None:
        valid_to = datetime.fromtimestamp(result.quote.valid_to, tz=timezone.utc)
        print(f"Quoted buy:       {result.quote.buy_amount}")
        print(f"Quoted fee:       {result.quote.fee_amount} (signed fee: {result.order.fee_amount if result.order else '-'})")
        print(f"Valid to:         {valid_to.isoformat()}")
    if result.allowance_issued is not None:
        print(f"Approval sent:    {'yes' if result.allowance_issued else 'no (sufficient)'}")
    if result.order_id:
        print(f"Order ID:         {result.order_id}")
    if result.error is not None:
        print(f"FAILED at stage:  {result.failed_stage.value if result.failed_stage else '?'}: {result.error}")
    if result.monitor is not None:
        print(f"Final state:      {result.monitor.state.value} after {result.monitor.fetches} fetches")
        snap = result.monitor.last_status
        if snap is not None and snap.executed_sell_amount is not None:
            print(f"Executed sell:    {snap.executed_sell_amount}")
            print(f"Executed buy:     {snap.executed_buy_amount}")
            print(f"Executed fee:     {snap.executed_fee_amount}")
        if snap is not None and snap.tx_hash:
            print(f"Settlement tx:    {snap.tx_hash}")
            link = explorer_tx_url(chain_id, snap.tx_hash)
            if link:
                print(f"Explorer:         {link}")
    print(f"Status polls:     {len(history)}")
    print("-------------------")
    return history
