"""PII redaction service."""
import re


class RedactionService:
    """Service for redacting consumer PII (complaints, accounts) from text."""
    
    EMAIL_PATTERN = re.compile(
        r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'
    )
    
    # International or 9-digit mobile numbers, optionally grouped
    PHONE_PATTERN = re.compile(
        r'(?:\+\d{1,3}[\s-]?)?\b9\d{2}[\s-]?\d{3}[\s-]?\d{3}\b'
    )
    
    # DNI is 8 digits, CE and RUC run up to 12
    DOCUMENT_PATTERN = re.compile(r'\b\d{8,12}\b')
    
    def redact_email(self, text: str) -> str:
        """Redact email addresses."""
        return self.EMAIL_PATTERN.sub('[EMAIL_REDACTED]', text)
    
    def redact_phone(self, text: str) -> str:
        """Redact phone numbers."""
        return self.PHONE_PATTERN.sub('[PHONE_REDACTED]', text)
    
    def redact_documents(self, text: str) -> str:
        """Redact identity document numbers."""
        return self.DOCUMENT_PATTERN.sub('[DOC_REDACTED]', text)
    
    def redact_text(self, text: str) -> str:
        """Redact all PII from text."""
        if not isinstance(text, str):
            return text
        
        result = self.redact_email(text)
        result = self.redact_phone(result)
        result = self.redact_documents(result)
        return result
