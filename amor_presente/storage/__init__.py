"""Image uploads to Supabase Storage."""
