from .models import STATUSES


def get_campaign_stats(db, campaign_id):
    """Per-status record counts for a campaign, zero-filled, plus total"""
    rows = db.fetch_all("""
        SELECT status, COUNT(*) AS count
        FROM email_tracking
        WHERE campaign_id = ?
        GROUP BY status
    """, (campaign_id,))

    stats = {'total': 0}
    stats.update({status: 0 for status in STATUSES})
    for row in rows:
        stats[row['status']] = row['count']
        stats['total'] += row['count']
    return stats
