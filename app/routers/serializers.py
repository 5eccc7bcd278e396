"""Shared ORM -> JSON shapes used by several routers."""


def iso(dt) -> str | None:
    return dt.isoformat() if dt else None


def profile_summary(p) -> dict | None:
    if p is None:
        return None
    return {
        "id": p.id,
        "fullName": p.full_name,
        "email": p.email,
        "avatarUrl": getattr(p, "avatar_url", None),
        "department": getattr(p, "department", None),
        "year": getattr(p, "year", None),
        "skills": list(getattr(p, "skills", None) or []),
        "role": getattr(p, "role", None),
    }


def job_to_response(j, *, include_creator: bool = True) -> dict:
    data = {
        "id": j.id,
        "title": j.title,
        "type": j.type,
        "description": j.description,
        "requirements": j.requirements,
        "duration": j.duration,
        "compensation": j.compensation,
        "location": j.location,
        "teamSize": j.team_size,
        "tags": list(j.tags or []),
        "status": j.status,
        "isDraft": bool(j.is_draft),
        "isPublished": bool(j.is_published),
        "publishedAt": iso(j.published_at),
        "isFilled": bool(j.is_filled),
        "filledAt": iso(getattr(j, "filled_at", None)),
        "views": j.views or 0,
        "applicationsCount": j.applications_count or 0,
        "approvedAt": iso(getattr(j, "approved_at", None)),
        "rejectionReason": getattr(j, "rejection_reason", None),
        "isPaid": bool(getattr(j, "is_paid", False)),
        "paymentAmount": getattr(j, "payment_amount", None),
        "createdById": j.created_by_id,
        "createdAt": iso(j.created_at),
    }
    if include_creator:
        data["createdBy"] = profile_summary(getattr(j, "created_by", None))
    return data


def resume_to_response(r) -> dict | None:
    if r is None:
        return None
    return {
        "id": r.id,
        "fileName": r.file_name,
        "fileUrl": r.file_url,
        "fileSize": r.file_size,
        "mimeType": r.mime_type,
        "isDefault": bool(r.is_default),
        "createdAt": iso(r.created_at),
    }


def application_to_response(a, *, with_job: bool = False, with_applicant: bool = False) -> dict:
    data = {
        "id": a.id,
        "jobId": a.job_id,
        "applicantId": a.applicant_id,
        "resumeId": a.resume_id,
        "proposal": a.proposal,
        "status": a.status,
        "matchScore": a.match_score,
        "matchAnalysis": a.match_analysis,
        "createdAt": iso(a.created_at),
        "updatedAt": iso(getattr(a, "updated_at", None)),
    }
    if with_job and getattr(a, "job", None) is not None:
        data["job"] = job_to_response(a.job)
    if with_applicant:
        data["applicant"] = profile_summary(getattr(a, "applicant", None))
        data["resume"] = resume_to_response(getattr(a, "resume", None))
    return data


def call_request_to_response(cr) -> dict:
    job = getattr(cr, "job", None)
    return {
        "id": cr.id,
        "jobId": cr.job_id,
        "requesterId": cr.requester_id,
        "receiverId": cr.receiver_id,
        "message": cr.message,
        "status": cr.status,
        "scheduledTime": iso(cr.scheduled_time),
        "roomId": cr.room_id,
        "roomName": cr.room_name,
        "roomCode": cr.room_code,
        "acceptedAt": iso(cr.accepted_at),
        "rejectedAt": iso(cr.rejected_at),
        "rejectReason": cr.reject_reason,
        "createdAt": iso(cr.created_at),
        "job": {"id": job.id, "title": job.title, "type": job.type} if job is not None else None,
        "requester": profile_summary(getattr(cr, "requester", None)),
        "receiver": profile_summary(getattr(cr, "receiver", None)),
    }


def notification_to_response(n) -> dict:
    return {
        "id": n.id,
        "type": n.type,
        "title": n.title,
        "content": n.content,
        "link": n.link,
        "metadata": n.extra,
        "isRead": bool(n.is_read),
        "createdAt": iso(n.created_at),
    }
